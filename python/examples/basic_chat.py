"""
Basic chat example.

This example demonstrates how to use the Python client to create an agent,
open a conversation and chat with it.
"""

import asyncio
import sys

# Add parent directory to path for imports when running directly
sys.path.insert(0, ".")

from agixt_client import AGiXTClient, ClientConfig


async def main():
    """Run the chat example."""
    config = ClientConfig.from_env()
    async with AGiXTClient.from_config(config) as client:
        print(f"✅ Connected to AGiXT at {config.base_url}")

        providers = await client.get_providers()
        print(f"\n📋 Available providers ({len(providers)})")

        # Create an agent for the example
        print("\n🚀 Creating agent...")
        await client.add_agent("ExampleAgent", {"provider": "default"})
        agent_id = await client.get_agent_id_by_name("ExampleAgent")
        if agent_id is None:
            print("❌ Agent could not be created", file=sys.stderr)
            return
        print(f"✅ Agent created: {agent_id}")

        # Start a conversation and chat
        await client.new_conversation(agent_id, "Example Chat")
        reply = await client.chat(agent_id, "What can you do?", "Example Chat")
        print(f"\n💬 Agent: {reply}")

        conversation_id = await client.get_conversation_id_by_name("Example Chat")
        if conversation_id:
            history = await client.get_conversation(conversation_id, limit=10)
            print(f"\n📜 Conversation has {len(history)} messages")
            await client.delete_conversation(conversation_id)

        print(f"\n🧹 {await client.delete_agent(agent_id)}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(1)
