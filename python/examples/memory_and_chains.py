"""
Memory and chain example.

This example demonstrates advanced features of the Python client:
- Teaching an agent text and URLs in a memory collection
- Querying memories
- Building and running a chain
- Error handling with raise_errors
"""

import asyncio
import sys

# Add parent directory to path for imports when running directly
sys.path.insert(0, ".")

from agixt_client import AGiXTClient, AGiXTClientError, ClientConfig


async def example_memory(client: AGiXTClient, agent_id: str):
    """Example of memory ingestion and retrieval."""
    print("\n" + "=" * 60)
    print("Example: Memory")
    print("=" * 60)

    print(await client.learn_text(agent_id, "Where is AGiXT hosted?", "AGiXT is hosted on GitHub.", collection_number=1))
    print(await client.learn_url(agent_id, "https://github.com/Josh-XT/AGiXT", collection_number=1))

    memories = await client.get_agent_memories(agent_id, "AGiXT hosting", limit=3, collection_number=1)
    for memory in memories:
        print(f"  🧠 {memory}")

    links = await client.get_browsed_links(agent_id, collection_number=1)
    print(f"🔗 Browsed links: {links}")

    print(await client.wipe_agent_memories(agent_id, collection_number=1))


async def example_chain(client: AGiXTClient, agent_id: str):
    """Example of building and running a chain."""
    print("\n" + "=" * 60)
    print("Example: Chains")
    print("=" * 60)

    await client.add_chain("Example Chain")
    chain_id = await client.get_chain_id_by_name("Example Chain")
    print(f"✅ Chain created: {chain_id}")

    await client.add_step(
        chain_id,
        1,
        agent_id,
        "Prompt",
        {"prompt_name": "Think About It", "user_input": "{user_input}"},
    )
    result = await client.run_chain(chain_id=chain_id, user_input="Why is the sky blue?", agent_id=agent_id)
    print(f"💬 Chain result: {result}")

    print(await client.delete_chain(chain_id))


async def main():
    """Run all examples."""
    config = ClientConfig.from_env()
    async with AGiXTClient.from_config(config, raise_errors=True) as client:
        await client.add_agent("MemoryExample", {"provider": "default"})
        agent_id = await client.get_agent_id_by_name("MemoryExample")
        try:
            await example_memory(client, agent_id)
            await example_chain(client, agent_id)
        except AGiXTClientError as e:
            print(f"❌ {e.message} (status {e.status})", file=sys.stderr)
        finally:
            await client.delete_agent(agent_id)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        sys.exit(0)
