"""
Unit tests for agixt_cli.py

These tests verify command parsing, client wiring and error conditions.
"""

import argparse
import unittest
from io import StringIO
from unittest.mock import AsyncMock, MagicMock, patch

# Import the CLI module
import agixt_cli
from agixt_client import ERROR_MESSAGE


def make_args(**kwargs):
    """Build a namespace with the global options filled in."""
    defaults = {"server": None, "api_key": None, "verbose": False}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def mock_client_class(**methods):
    """Patchable AGiXTClient whose instances are async context managers."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    for name, value in methods.items():
        setattr(client, name, AsyncMock(return_value=value))
    client_class = MagicMock()
    client_class.from_config.return_value = client
    return client_class, client


class TestPrintFunctions(unittest.TestCase):
    """Test output functions."""

    def test_print_error(self):
        """Test error message printing."""
        output = StringIO()
        with patch('sys.stderr', output):
            agixt_cli.print_error("Test error")
        self.assertIn("[agixt-cli] ERROR: Test error", output.getvalue())

    def test_print_info(self):
        """Test info message printing."""
        output = StringIO()
        with patch('sys.stdout', output):
            agixt_cli.print_info("Test info")
        self.assertIn("[agixt-cli] Test info", output.getvalue())

    @patch('sys.stdout', new_callable=StringIO)
    def test_print_result_json(self, mock_stdout):
        """Test JSON pretty-printing of structured results."""
        agixt_cli.print_result([{"id": "a1"}])
        self.assertIn('"id": "a1"', mock_stdout.getvalue())


class TestIsFailure(unittest.TestCase):
    """Test sentinel detection."""

    def test_sentinels(self):
        self.assertTrue(agixt_cli.is_failure(ERROR_MESSAGE))
        self.assertTrue(agixt_cli.is_failure({"error": ERROR_MESSAGE}))
        self.assertTrue(agixt_cli.is_failure([ERROR_MESSAGE]))
        self.assertTrue(agixt_cli.is_failure([{"error": ERROR_MESSAGE}]))

    def test_success(self):
        self.assertFalse(agixt_cli.is_failure("Hello"))
        self.assertFalse(agixt_cli.is_failure([]))
        self.assertFalse(agixt_cli.is_failure({"agents": []}))


class TestBuildClient(unittest.TestCase):
    """Test client configuration."""

    @patch.dict('os.environ', {"AGIXT_URI": "http://env:7437", "AGIXT_API_KEY": "env-key"})
    @patch('agixt_cli.ClientConfig.from_env')
    def test_overrides(self, mock_from_env):
        """Test that command-line options win over the environment."""
        mock_from_env.return_value = agixt_cli.ClientConfig(base_url="http://env:7437", api_key="env-key")
        client = agixt_cli.build_client(make_args(server="http://cli:7437", api_key="cli-key"))
        self.assertEqual(client.base_url.host, "cli")
        self.assertEqual(client.headers["Authorization"], "cli-key")

    @patch('agixt_cli.ClientConfig.from_env')
    def test_environment(self, mock_from_env):
        """Test environment configuration without overrides."""
        mock_from_env.return_value = agixt_cli.ClientConfig(base_url="http://env:7437", api_key="env-key")
        client = agixt_cli.build_client(make_args())
        self.assertEqual(client.base_url.host, "env")
        self.assertEqual(client.headers["Authorization"], "env-key")

    @patch('sys.stderr', new_callable=StringIO)
    @patch('agixt_cli.ClientConfig.from_env')
    def test_server_with_path_rejected(self, mock_from_env, mock_stderr):
        """Test that a --server carrying a path exits with code 2."""
        mock_from_env.return_value = agixt_cli.ClientConfig()
        result = agixt_cli.cmd_agents(make_args(server="http://host:7437/agixt"))
        self.assertEqual(result, 2)
        self.assertIn("base_url must be a server origin", mock_stderr.getvalue())


class TestCommands(unittest.TestCase):
    """Test command handlers."""

    @patch('sys.stdout', new_callable=StringIO)
    def test_cmd_agents(self, mock_stdout):
        """Test agent listing."""
        client_class, client = mock_client_class(get_agents=[{"id": "a1", "name": "AGiXT"}])
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_agents(make_args())
        self.assertEqual(result, 0)
        client.get_agents.assert_awaited_once()
        self.assertIn("AGiXT", mock_stdout.getvalue())

    @patch('sys.stderr', new_callable=StringIO)
    def test_cmd_providers_failure(self, mock_stderr):
        """Test that the error sentinel gives exit code 1."""
        client_class, _ = mock_client_class(get_providers=[ERROR_MESSAGE])
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_providers(make_args())
        self.assertEqual(result, 1)
        self.assertIn("Request failed", mock_stderr.getvalue())

    @patch('sys.stdout', new_callable=StringIO)
    def test_cmd_conversations_for_agent(self, mock_stdout):
        """Test conversation listing with an agent filter."""
        client_class, client = mock_client_class(get_conversations=[{"id": "c1", "name": "Chat"}])
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_conversations(make_args(agent="a1"))
        self.assertEqual(result, 0)
        client.get_conversations.assert_awaited_once_with("a1")

    @patch('sys.stdout', new_callable=StringIO)
    def test_cmd_chat(self, mock_stdout):
        """Test chatting with an agent by name."""
        client_class, client = mock_client_class(get_agent_id_by_name="a1", chat="Hi there!")
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_chat(make_args(agent_name="AGiXT", message="Hello", conversation="cli"))
        self.assertEqual(result, 0)
        client.chat.assert_awaited_once_with("a1", "Hello", "cli")
        self.assertIn("Hi there!", mock_stdout.getvalue())

    @patch('sys.stderr', new_callable=StringIO)
    def test_cmd_chat_unknown_agent(self, mock_stderr):
        """Test chatting with an agent that does not exist."""
        client_class, client = mock_client_class(get_agent_id_by_name=None)
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_chat(make_args(agent_name="Nope", message="Hello", conversation="cli"))
        self.assertEqual(result, 1)
        self.assertIn("not found", mock_stderr.getvalue())
        self.assertNotIn("Request failed", mock_stderr.getvalue())
        client.chat.assert_not_called()

    @patch('sys.stdout', new_callable=StringIO)
    def test_cmd_chain(self, mock_stdout):
        """Test running a chain by name."""
        client_class, client = mock_client_class(run_chain="Chain result")
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_chain(make_args(chain_name="Smart Chat", user_input="Hi", agent=None))
        self.assertEqual(result, 0)
        client.run_chain.assert_awaited_once_with(chain_name="Smart Chat", user_input="Hi", agent_id="")

    @patch('sys.stdout', new_callable=StringIO)
    def test_cmd_login(self, mock_stdout):
        """Test login prints the token."""
        client_class, client = mock_client_class(login={"token": "jwt-123"})
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_login(make_args(username="ada", password="pw", mfa_token=None))
        self.assertEqual(result, 0)
        client.login.assert_awaited_once_with("ada", "pw", None)
        self.assertIn("jwt-123", mock_stdout.getvalue())

    @patch('sys.stderr', new_callable=StringIO)
    def test_cmd_login_rejected(self, mock_stderr):
        """Test login without a token in the response."""
        client_class, _ = mock_client_class(login={"detail": "Invalid credentials"})
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_login(make_args(username="ada", password="bad", mfa_token=None))
        self.assertEqual(result, 1)
        self.assertIn("Login failed", mock_stderr.getvalue())
        self.assertNotIn("Request failed", mock_stderr.getvalue())

    @patch('sys.stdout', new_callable=StringIO)
    @patch('agixt_cli.asyncio.run')
    def test_keyboard_interrupt(self, mock_run, mock_stdout):
        """Test Ctrl-C handling."""
        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt()

        mock_run.side_effect = interrupt
        client_class, _ = mock_client_class(get_agents=[])
        with patch('agixt_cli.AGiXTClient', client_class):
            result = agixt_cli.cmd_agents(make_args())
        self.assertEqual(result, 130)


class TestMainFunction(unittest.TestCase):
    """Test the main function."""

    @patch('sys.argv', ['agixt_cli.py'])
    @patch('sys.stdout', new_callable=StringIO)
    def test_main_no_command(self, mock_stdout):
        """Test main function with no command (shows help)."""
        result = agixt_cli.main()
        self.assertEqual(result, 1)
        output = mock_stdout.getvalue()
        self.assertIn("usage:", output.lower())

    @patch('sys.argv', ['agixt_cli.py', '--help'])
    @patch('sys.stdout', new_callable=StringIO)
    def test_main_help_flag(self, mock_stdout):
        """Test main function with --help flag."""
        result = agixt_cli.main()
        self.assertEqual(result, 0)
        self.assertIn("Command-line client", mock_stdout.getvalue())

    @patch('sys.argv', ['agixt_cli.py', 'invalid_command'])
    @patch('sys.stderr', new_callable=StringIO)
    def test_main_invalid_command(self, mock_stderr):
        """Test main function with invalid command."""
        result = agixt_cli.main()
        self.assertEqual(result, 2)
        self.assertIn("invalid choice", mock_stderr.getvalue().lower())

    @patch('sys.argv', ['agixt_cli.py', 'agents'])
    def test_main_dispatch(self):
        """Test that main dispatches to the command handler."""
        handler = MagicMock(return_value=0)
        with patch.dict(agixt_cli.COMMANDS, {"agents": handler}):
            result = agixt_cli.main()
        self.assertEqual(result, 0)
        handler.assert_called_once()

    @patch('sys.argv', ['agixt_cli.py', '--server', 'http://host:7437', 'chat', 'AGiXT', 'Hello'])
    def test_main_chat_arguments(self):
        """Test chat argument parsing."""
        handler = MagicMock(return_value=0)
        with patch.dict(agixt_cli.COMMANDS, {"chat": handler}):
            agixt_cli.main()
        args = handler.call_args[0][0]
        self.assertEqual(args.server, 'http://host:7437')
        self.assertEqual(args.agent_name, 'AGiXT')
        self.assertEqual(args.message, 'Hello')
        self.assertEqual(args.conversation, 'agixt-cli')


if __name__ == '__main__':
    unittest.main()
