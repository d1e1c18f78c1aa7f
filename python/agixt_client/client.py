"""
Main client implementation for the AGiXT Python client.
"""

import asyncio
import functools
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from pydantic import BaseModel, ValidationError
from yarl import URL

from agixt_client.config import DEFAULT_BASE_URL, ClientConfig
from agixt_client.models import (
    AgentCommandsRequest,
    AgentRequest,
    BrowsedLinkRequest,
    ChainNameRequest,
    ChainStepRequest,
    ChangePasswordRequest,
    CompanyRequest,
    ConversationMessageRequest,
    ConversationRequest,
    DatasetRequest,
    DisableMfaRequest,
    ErrorResponse,
    ExecuteCommandRequest,
    ExternalSourceRequest,
    FeedbackRequest,
    ImageGenerationRequest,
    ImportAgentRequest,
    ImportChainRequest,
    ImportMemoriesRequest,
    LearnArxivRequest,
    LearnFileRequest,
    LearnGitHubRequest,
    LearnTextRequest,
    LearnUrlRequest,
    LoginRequest,
    MagicLinkLoginRequest,
    MemoryQueryRequest,
    MfaTokenRequest,
    MoveStepRequest,
    OAuth2LoginRequest,
    PersonaRequest,
    PlanTaskRequest,
    PromptAgentRequest,
    PromptRequest,
    ReaderRequest,
    RegisterUserRequest,
    RenameConversationRequest,
    RenamePromptRequest,
    RenameRequest,
    RunChainRequest,
    RunChainStepRequest,
    SetPasswordRequest,
    TextToSpeechRequest,
    ToggleCommandRequest,
    TrainRequest,
    TranscriptionRequest,
    TranslationRequest,
    UpdateCompanyRequest,
    UpdateMessageRequest,
    UpdatePromptRequest,
)

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Unable to retrieve data."

Body = Union[BaseModel, Dict[str, Any], None]


class AGiXTClientError(Exception):
    """Base exception for client errors."""

    def __init__(self, message: str, details: Optional[str] = None, status: Optional[int] = None):
        self.message = message
        self.details = details
        self.status = status
        super().__init__(self.message)


def _as_dict(message: str) -> Dict[str, Any]:
    return {"error": message}


def _as_list(message: str) -> List[Any]:
    return [message]


def _as_records(message: str) -> List[Dict[str, Any]]:
    return [{"error": message}]


def _as_false(message: str) -> bool:
    return False


def _as_none(message: str) -> None:
    return None


def on_error(fallback: Callable[[str], Any]):
    """
    Turn client errors into the sentinel value the AGiXT API contract expects.

    The wrapped coroutine runs normally; an AGiXTClientError is logged and
    ``fallback(ERROR_MESSAGE)`` is returned instead, unless the client was
    created with ``raise_errors=True``.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self: "AGiXTClient", *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except AGiXTClientError as e:
                if self.raise_errors:
                    raise
                logger.error("%s failed: %s", func.__name__, e)
                return fallback(ERROR_MESSAGE)

        return wrapper

    return decorator


class AGiXTClient:
    """
    Async client for the AGiXT REST API.

    Example:
        ```python
        async with AGiXTClient("http://localhost:7437", api_key="...") as client:
            agent_id = await client.get_agent_id_by_name("AGiXT")
            reply = await client.chat(agent_id, "Hello!", conversation_id="My Chat")
            print(reply)
        ```
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 300.0,
        verify_ssl: bool = True,
        raise_errors: bool = False,
    ):
        """
        Initialize the client.

        Args:
            base_url: Origin of the AGiXT server, scheme, host and port only
                (default: "http://localhost:7437"). Raises ValueError when it
                carries a path or query.
            api_key: API key or JWT sent as the Authorization header
            timeout: Request timeout in seconds (default: 300)
            verify_ssl: Whether to verify SSL certificates (default: True)
            raise_errors: Raise AGiXTClientError instead of returning
                "Unable to retrieve data." sentinels (default: False)
        """
        base_url = base_url or DEFAULT_BASE_URL
        if base_url.endswith("/"):
            base_url = base_url[:-1]
        self.base_url = URL(base_url)
        if not self.base_url.is_absolute() or self.base_url.path not in ("", "/") or self.base_url.query_string:
            raise ValueError(f"base_url must be a server origin such as {DEFAULT_BASE_URL!r}, got {base_url!r}")
        self.timeout = ClientTimeout(total=timeout)
        self.verify_ssl = verify_ssl
        self.raise_errors = raise_errors
        self.headers: Dict[str, str] = {}
        if api_key:
            self.set_api_key(api_key)
        self._session: Optional[ClientSession] = None
        self._owner = False

    @classmethod
    def from_config(cls, config: ClientConfig, raise_errors: bool = False) -> "AGiXTClient":
        """Create a client from a ClientConfig."""
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            raise_errors=raise_errors,
        )

    async def __aenter__(self) -> "AGiXTClient":
        """Enter context manager and create session."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and close session."""
        await self.close()

    async def start(self) -> None:
        """Start the client session."""
        if self._session is None:
            self._session = ClientSession(
                base_url=self.base_url,
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(ssl=self.verify_ssl),
            )
            self._owner = True

    async def close(self) -> None:
        """Close the client session."""
        if self._session is not None and self._owner:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> ClientSession:
        """Get the HTTP session."""
        if self._session is None or self._session.closed:
            raise RuntimeError(
                "Client session not initialized. Use async context manager or call start() first."
            )
        return self._session

    def set_api_key(self, api_key: str) -> None:
        """Replace the Authorization header, dropping any "Bearer " prefix."""
        self.headers["Authorization"] = api_key.replace("Bearer ", "").replace("bearer ", "")

    def _adopt_token(self, status: int, data: Any) -> None:
        if status < 400 and isinstance(data, dict) and data.get("token"):
            self.set_api_key(str(data["token"]))
            logger.info("Authorization header updated from login response")

    async def _read_body(self, response: aiohttp.ClientResponse) -> Any:
        """Decode a response body as JSON, falling back to plain text."""
        try:
            text = await response.text()
        except UnicodeDecodeError as e:
            raise AGiXTClientError(
                f"HTTP {response.status}: response body is not valid text", repr(e), response.status
            ) from e
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    async def _exchange(
        self,
        method: str,
        path: str,
        body: Body = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Any]:
        """Perform one HTTP call and return the status with the decoded body."""
        kwargs: Dict[str, Any] = {"headers": self.headers}
        if body is not None:
            if isinstance(body, BaseModel):
                body = body.model_dump(exclude_none=True)
            kwargs["json"] = body
        if params:
            kwargs["params"] = params

        logger.debug("%s %s", method, path)
        try:
            async with self.session.request(method, path, **kwargs) as response:
                return response.status, await self._read_body(response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AGiXTClientError(f"{method} {path} failed: {e!r}") from e

    def _handle_response(self, status: int, data: Any) -> Any:
        """Raise AGiXTClientError for error statuses, otherwise return the body."""
        if status >= 400:
            message = None
            if isinstance(data, dict):
                try:
                    message = ErrorResponse(**data).message
                except ValidationError:
                    # Fall back to the raw body
                    message = None
            details = data if isinstance(data, str) else json.dumps(data)
            raise AGiXTClientError(message or f"HTTP {status}: {details}", details, status)
        return data

    async def _request(
        self,
        method: str,
        path: str,
        body: Body = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        status, data = await self._exchange(method, path, body, params)
        return self._handle_response(status, data)

    @staticmethod
    def _unwrap(data: Any, key: str) -> Any:
        """Extract a required field from a response object."""
        if not isinstance(data, dict) or key not in data:
            raise AGiXTClientError(f"Response is missing '{key}'", details=str(data))
        return data[key]

    @staticmethod
    def _find_id(records: Any, name: str) -> Optional[str]:
        """Return the "id" of the first record whose "name" matches."""
        if not isinstance(records, list):
            raise AGiXTClientError("Expected a list of records", details=str(records))
        for record in records:
            if isinstance(record, dict) and record.get("name") == name:
                record_id = record.get("id")
                return str(record_id) if record_id is not None else None
        return None

    @staticmethod
    def _message(data: Any, key: str = "message") -> Any:
        """Extract an optional field, returning the whole body when it is absent."""
        if isinstance(data, dict) and key in data:
            return data[key]
        return data

    # Auth

    @on_error(_as_dict)
    async def login(self, username: str, password: str, mfa_token: Optional[str] = None) -> Dict[str, Any]:
        """
        Log in with username/password.

        On success the returned token replaces the client's Authorization
        header, so later calls run as the logged-in user.

        Args:
            username: Username or email address
            password: User's password
            mfa_token: TOTP code if MFA is enabled

        Returns:
            The server's login response (contains "token" on success)
        """
        request = LoginRequest(username=username, password=password, mfa_token=mfa_token or None)
        status, data = await self._exchange("POST", "/v1/login", request)
        self._adopt_token(status, data)
        return data

    @on_error(str)
    async def login_magic_link(self, email: str, otp: str) -> Any:
        """Legacy login with email + OTP, kept for backward compatibility."""
        return await self._request("POST", "/v1/login/magic-link", MagicLinkLoginRequest(email=email, token=otp))

    @on_error(_as_dict)
    async def register_user(
        self,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str = "",
        last_name: str = "",
        username: Optional[str] = None,
        organization_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Register a new user.

        Args:
            email: User's email address
            password: User's password
            confirm_password: Password confirmation
            first_name: User's first name
            last_name: User's last name
            username: Desired username
            organization_name: Company/organization name

        Returns:
            Response with user_id, username and token on success. The token
            replaces the client's Authorization header.
        """
        request = RegisterUserRequest(
            email=email,
            password=password,
            confirm_password=confirm_password,
            first_name=first_name,
            last_name=last_name,
            username=username or None,
            organization_name=organization_name or None,
        )
        status, data = await self._exchange("POST", "/v1/user", request)
        self._adopt_token(status, data)
        return data

    @on_error(_as_dict)
    async def get_mfa_setup(self) -> Dict[str, Any]:
        """Get MFA setup info: provisioning_uri, secret and mfa_enabled."""
        return await self._request("GET", "/v1/user/mfa/setup")

    @on_error(_as_dict)
    async def enable_mfa(self, mfa_token: str) -> Dict[str, Any]:
        return await self._request("POST", "/v1/user/mfa/enable", MfaTokenRequest(mfa_token=mfa_token))

    @on_error(_as_dict)
    async def disable_mfa(self, password: Optional[str] = None, mfa_token: Optional[str] = None) -> Dict[str, Any]:
        request = DisableMfaRequest(password=password or None, mfa_token=mfa_token or None)
        return await self._request("POST", "/v1/user/mfa/disable", request)

    @on_error(_as_dict)
    async def change_password(self, current_password: str, new_password: str, confirm_password: str) -> Dict[str, Any]:
        request = ChangePasswordRequest(
            current_password=current_password,
            new_password=new_password,
            confirm_password=confirm_password,
        )
        return await self._request("POST", "/v1/user/password/change", request)

    @on_error(_as_dict)
    async def set_password(self, new_password: str, confirm_password: str) -> Dict[str, Any]:
        """Set a password for users who don't have one (e.g. social login users)."""
        request = SetPasswordRequest(new_password=new_password, confirm_password=confirm_password)
        return await self._request("POST", "/v1/user/password/set", request)

    @on_error(_as_false)
    async def user_exists(self, email: str) -> bool:
        data = await self._request("GET", "/v1/user/exists", params={"email": email})
        return bool(data)

    @on_error(_as_dict)
    async def update_user(self, **updates: Any) -> Dict[str, Any]:
        """Update fields of the current user, e.g. first_name="Ada"."""
        return await self._request("PUT", "/v1/user", updates)

    @on_error(_as_dict)
    async def get_user(self) -> Dict[str, Any]:
        return await self._request("GET", "/v1/user")

    @on_error(_as_list)
    async def get_oauth2_providers(self) -> List[Any]:
        return await self._request("GET", "/v1/oauth2")

    @on_error(_as_list)
    async def get_user_oauth2_connections(self) -> List[str]:
        return await self._request("GET", "/v1/user/oauth2")

    @on_error(_as_dict)
    async def oauth2_login(self, provider: str, code: str, referrer: Optional[str] = None) -> Dict[str, Any]:
        """
        Exchange an OAuth2 authorization code for an AGiXT session.

        Args:
            provider: Provider name as listed by get_oauth2_providers()
            code: Authorization code returned by the provider
            referrer: Redirect URI used to obtain the code

        Returns:
            The server's response; a returned token replaces the
            Authorization header.
        """
        request = OAuth2LoginRequest(code=code, referrer=referrer)
        status, data = await self._exchange("POST", f"/v1/oauth2/{provider}", request)
        self._adopt_token(status, data)
        return data

    # Providers

    @on_error(_as_list)
    async def get_providers(self) -> List[Any]:
        return await self._request("GET", "/v1/providers")

    @on_error(_as_dict)
    async def get_embedders(self) -> Dict[str, Any]:
        data = await self._request("GET", "/v1/embedders")
        return self._unwrap(data, "embedders")

    # Agents

    @on_error(_as_dict)
    async def add_agent(
        self,
        agent_name: str,
        settings: Optional[Dict[str, Any]] = None,
        commands: Optional[Dict[str, bool]] = None,
        training_urls: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create an agent.

        Args:
            agent_name: Name of the new agent
            settings: Provider settings, e.g. {"provider": "openai"}
            commands: Command name -> enabled
            training_urls: URLs the agent should learn from on creation

        Returns:
            The server's response for the created agent
        """
        request = AgentRequest(
            agent_name=agent_name,
            settings=settings or {},
            commands=commands or {},
            training_urls=training_urls or [],
        )
        return await self._request("POST", "/v1/agent", request)

    @on_error(_as_dict)
    async def import_agent(
        self,
        agent_name: str,
        settings: Optional[Dict[str, Any]] = None,
        commands: Optional[Dict[str, bool]] = None,
    ) -> Dict[str, Any]:
        request = ImportAgentRequest(agent_name=agent_name, settings=settings or {}, commands=commands or {})
        return await self._request("POST", "/v1/agent/import", request)

    @on_error(str)
    async def rename_agent(self, agent_id: str, new_name: str) -> Any:
        return await self._request("PATCH", f"/v1/agent/{agent_id}", RenameRequest(new_name=new_name))

    @on_error(str)
    async def update_agent_settings(self, agent_id: str, settings: Dict[str, Any], agent_name: str = "") -> str:
        """Replace an agent's settings. Commands and training URLs are sent empty."""
        request = AgentRequest(agent_name=agent_name, settings=settings)
        data = await self._request("PUT", f"/v1/agent/{agent_id}", request)
        return self._message(data)

    @on_error(str)
    async def update_agent_commands(self, agent_id: str, commands: Dict[str, bool]) -> str:
        data = await self._request("PUT", f"/v1/agent/{agent_id}/commands", AgentCommandsRequest(commands=commands))
        return self._message(data)

    @on_error(str)
    async def delete_agent(self, agent_id: str) -> str:
        data = await self._request("DELETE", f"/v1/agent/{agent_id}")
        return self._message(data)

    @on_error(_as_records)
    async def get_agents(self) -> List[Dict[str, Any]]:
        """List agents visible to the current user, each with "id" and "name"."""
        data = await self._request("GET", "/v1/agent")
        return self._unwrap(data, "agents")

    @on_error(_as_dict)
    async def get_agent_config(self, agent_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/v1/agent/{agent_id}")
        return self._unwrap(data, "agent")

    @on_error(_as_none)
    async def get_agent_id_by_name(self, agent_name: str) -> Optional[str]:
        """Resolve an agent name to its ID, or None when no agent matches."""
        return self._find_id(await self.get_agents(), agent_name)

    @on_error(str)
    async def get_persona(self, agent_id: str) -> Any:
        data = await self._request("GET", f"/v1/agent/{agent_id}/persona")
        return self._message(data)

    @on_error(str)
    async def update_persona(self, agent_id: str, persona: str) -> str:
        data = await self._request("PUT", f"/v1/agent/{agent_id}/persona", PersonaRequest(persona=persona))
        return self._message(data)

    @on_error(_as_list)
    async def get_agent_extensions(self, agent_id: str) -> List[Any]:
        data = await self._request("GET", f"/v1/agent/{agent_id}/extensions")
        return self._unwrap(data, "extensions")

    # Conversations

    @on_error(_as_list)
    async def get_conversations(self, agent_id: str = "") -> List[Any]:
        """
        List conversations.

        Args:
            agent_id: Only list conversations of this agent when given

        Returns:
            Conversation objects, each with "id" and "name"
        """
        params = {"agent_id": agent_id} if agent_id else None
        return await self._request("GET", "/v1/conversations", params=params)

    @on_error(_as_records)
    async def get_conversation(self, conversation_id: str, limit: int = 100, page: int = 1) -> List[Dict[str, Any]]:
        """
        Get one page of a conversation's history.

        Args:
            conversation_id: Conversation to read
            limit: Messages per page (default: 100)
            page: 1-based page number (default: 1)

        Returns:
            Messages of the requested page
        """
        data = await self._request(
            "GET",
            f"/v1/conversation/{conversation_id}",
            params={"limit": limit, "page": page},
        )
        return self._unwrap(data, "conversation_history")

    @on_error(_as_dict)
    async def fork_conversation(self, conversation_id: str, message_id: str) -> Dict[str, Any]:
        """Copy a conversation up to and including message_id into a new one."""
        return await self._request("POST", f"/v1/conversation/fork/{conversation_id}/{message_id}")

    @on_error(_as_dict)
    async def new_conversation(
        self,
        agent_id: str,
        conversation_name: str,
        conversation_content: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        request = ConversationRequest(
            conversation_name=conversation_name,
            agent_id=agent_id,
            conversation_content=conversation_content or [],
        )
        return await self._request("POST", "/v1/conversation", request)

    @on_error(_as_dict)
    async def rename_conversation(self, conversation_id: str, new_name: str = "-") -> Dict[str, Any]:
        """Rename a conversation. The server picks a name when new_name is "-"."""
        request = RenameConversationRequest(new_conversation_name=new_name)
        return await self._request("PUT", f"/v1/conversation/{conversation_id}", request)

    @on_error(str)
    async def delete_conversation(self, conversation_id: str) -> str:
        data = await self._request("DELETE", f"/v1/conversation/{conversation_id}")
        return self._message(data)

    @on_error(str)
    async def delete_conversation_message(self, conversation_id: str, message_id: str) -> str:
        data = await self._request("DELETE", f"/v1/conversation/{conversation_id}/message/{message_id}")
        return self._message(data)

    @on_error(str)
    async def update_conversation_message(self, conversation_id: str, message_id: str, new_message: str) -> str:
        data = await self._request(
            "PUT",
            f"/v1/conversation/{conversation_id}/message/{message_id}",
            UpdateMessageRequest(new_message=new_message),
        )
        return self._message(data)

    @on_error(str)
    async def new_conversation_message(self, role: str, message: str, conversation_id: str) -> str:
        """Append a message to a conversation as the given role."""
        data = await self._request(
            "POST",
            f"/v1/conversation/{conversation_id}/message",
            ConversationMessageRequest(role=role, message=message),
        )
        return self._message(data)

    @on_error(_as_none)
    async def get_conversation_id_by_name(self, conversation_name: str) -> Optional[str]:
        return self._find_id(await self.get_conversations(), conversation_name)

    # Prompting and commands

    @on_error(str)
    async def prompt_agent(self, agent_id: str, prompt_name: str, prompt_args: Dict[str, Any]) -> Any:
        """
        Run a named prompt template through an agent.

        Args:
            agent_id: Agent to prompt
            prompt_name: Prompt template name, e.g. "Chat"
            prompt_args: Template variables plus options such as
                conversation_name or disable_memory

        Returns:
            The agent's response text
        """
        request = PromptAgentRequest(prompt_name=prompt_name, prompt_args=prompt_args)
        data = await self._request("POST", f"/v1/agent/{agent_id}/prompt", request)
        return self._message(data, "response")

    async def instruct(self, agent_id: str, user_input: str, conversation_id: str) -> Any:
        return await self.prompt_agent(
            agent_id,
            "instruct",
            {
                "user_input": user_input,
                "disable_memory": True,
                "conversation_name": conversation_id,
            },
        )

    async def chat(self, agent_id: str, user_input: str, conversation_id: str, context_results: int = 4) -> Any:
        """Chat with an agent, injecting context_results memories into the prompt."""
        return await self.prompt_agent(
            agent_id,
            "Chat",
            {
                "user_input": user_input,
                "context_results": context_results,
                "conversation_name": conversation_id,
                "disable_memory": True,
            },
        )

    async def smart_instruct(self, agent_id: str, user_input: str, conversation_id: str) -> Any:
        return await self.run_chain(
            chain_name="Smart Instruct",
            user_input=user_input,
            agent_id=agent_id,
            all_responses=False,
            from_step=1,
            chain_args={"conversation_name": conversation_id, "disable_memory": True},
        )

    async def smart_chat(self, agent_id: str, user_input: str, conversation_id: str) -> Any:
        return await self.run_chain(
            chain_name="Smart Chat",
            user_input=user_input,
            agent_id=agent_id,
            all_responses=False,
            from_step=1,
            chain_args={"conversation_name": conversation_id, "disable_memory": True},
        )

    @on_error(_as_dict)
    async def get_commands(self, agent_id: str) -> Dict[str, Any]:
        """Get the agent's commands as name -> enabled."""
        data = await self._request("GET", f"/v1/agent/{agent_id}/command")
        return self._unwrap(data, "commands")

    @on_error(str)
    async def toggle_command(self, agent_id: str, command_name: str, enable: bool) -> str:
        request = ToggleCommandRequest(command_name=command_name, enable=enable)
        data = await self._request("PATCH", f"/v1/agent/{agent_id}/command", request)
        return self._message(data)

    @on_error(str)
    async def execute_command(
        self,
        agent_id: str,
        command_name: str,
        command_args: Dict[str, Any],
        conversation_id: str = "",
    ) -> Any:
        request = ExecuteCommandRequest(
            command_name=command_name,
            command_args=command_args,
            conversation_name=conversation_id,
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/command", request)
        return self._message(data, "response")

    @on_error(str)
    async def plan_task(
        self,
        agent_id: str,
        user_input: str,
        websearch: bool = False,
        websearch_depth: int = 3,
        conversation_id: str = "",
        log_user_input: bool = True,
        log_output: bool = True,
        enable_new_command: bool = True,
    ) -> Any:
        """
        Ask an agent to break a task down into a plan.

        Args:
            agent_id: Agent that plans the task
            user_input: Task description
            websearch: Research the web before planning
            websearch_depth: Search depth when websearch is on
            conversation_id: Conversation the plan is logged to
            log_user_input: Log the task to the conversation
            log_output: Log the plan to the conversation
            enable_new_command: Allow the agent to enable commands it needs

        Returns:
            The plan text
        """
        request = PlanTaskRequest(
            user_input=user_input,
            websearch=websearch,
            websearch_depth=websearch_depth,
            conversation_name=conversation_id,
            log_user_input=log_user_input,
            log_output=log_output,
            enable_new_command=enable_new_command,
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/plan/task", request)
        return self._message(data, "response")

    async def positive_feedback(
        self,
        agent_id: str,
        message: str,
        user_input: str,
        feedback: str,
        conversation_id: str = "",
    ) -> str:
        return await self._provide_feedback(agent_id, message, user_input, feedback, True, conversation_id)

    async def negative_feedback(
        self,
        agent_id: str,
        message: str,
        user_input: str,
        feedback: str,
        conversation_id: str = "",
    ) -> str:
        return await self._provide_feedback(agent_id, message, user_input, feedback, False, conversation_id)

    @on_error(str)
    async def _provide_feedback(
        self,
        agent_id: str,
        message: str,
        user_input: str,
        feedback: str,
        positive: bool,
        conversation_id: str,
    ) -> str:
        request = FeedbackRequest(
            user_input=user_input,
            message=message,
            feedback=feedback,
            positive=positive,
            conversation_name=conversation_id,
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/feedback", request)
        return self._message(data)

    # Chains

    @on_error(_as_list)
    async def get_chains(self) -> List[Any]:
        return await self._request("GET", "/v1/chains")

    @on_error(_as_dict)
    async def get_chain(self, chain_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/v1/chain/{chain_id}")

    @on_error(_as_dict)
    async def get_chain_responses(self, chain_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/v1/chain/{chain_id}/responses")
        return self._unwrap(data, "chain")

    @on_error(_as_list)
    async def get_chain_args(self, chain_id: str) -> List[str]:
        return await self._request("GET", f"/v1/chain/{chain_id}/args")

    @on_error(str)
    async def run_chain(
        self,
        chain_id: str = "",
        chain_name: str = "",
        user_input: str = "",
        agent_id: str = "",
        all_responses: bool = False,
        from_step: int = 1,
        chain_args: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Run a chain server-side.

        Args:
            chain_id: Chain to run; takes precedence over chain_name
            chain_name: Chain to run when chain_id is empty
            user_input: Input passed to the chain
            agent_id: Run every step with this agent instead of the step's own
            all_responses: Return every step's response instead of the last
            from_step: 1-based step to start from
            chain_args: Extra chain arguments

        Returns:
            The chain's response
        """
        request = RunChainRequest(
            prompt=user_input,
            agent_override=agent_id,
            all_responses=all_responses,
            from_step=from_step,
            chain_args=chain_args or {},
        )
        endpoint = chain_id or chain_name
        return await self._request("POST", f"/v1/chain/{endpoint}/run", request)

    @on_error(str)
    async def run_chain_step(
        self,
        chain_id: str,
        step_number: int,
        user_input: str,
        agent_id: str = "",
        chain_args: Optional[Dict[str, Any]] = None,
    ) -> Any:
        request = RunChainStepRequest(prompt=user_input, agent_override=agent_id, chain_args=chain_args or {})
        return await self._request("POST", f"/v1/chain/{chain_id}/run/step/{step_number}", request)

    @on_error(_as_dict)
    async def add_chain(self, chain_name: str) -> Dict[str, Any]:
        return await self._request("POST", "/v1/chain", ChainNameRequest(chain_name=chain_name))

    @on_error(str)
    async def import_chain(self, chain_name: str, steps: Any) -> str:
        data = await self._request("POST", "/v1/chain/import", ImportChainRequest(chain_name=chain_name, steps=steps))
        return self._message(data)

    @on_error(str)
    async def rename_chain(self, chain_id: str, new_name: str) -> str:
        data = await self._request("PUT", f"/v1/chain/{chain_id}", RenameRequest(new_name=new_name))
        return self._message(data)

    @on_error(str)
    async def delete_chain(self, chain_id: str) -> str:
        data = await self._request("DELETE", f"/v1/chain/{chain_id}")
        return self._message(data)

    @on_error(str)
    async def add_step(self, chain_id: str, step_number: int, agent_id: str, prompt_type: str, prompt: Any) -> str:
        """Add a step to a chain; prompt_type is "Prompt", "Chain" or "Command"."""
        request = ChainStepRequest(
            step_number=step_number,
            agent_id=agent_id,
            prompt_type=prompt_type,
            prompt=prompt,
        )
        data = await self._request("POST", f"/v1/chain/{chain_id}/step", request)
        return self._message(data)

    @on_error(str)
    async def update_step(self, chain_id: str, step_number: int, agent_id: str, prompt_type: str, prompt: Any) -> str:
        request = ChainStepRequest(
            step_number=step_number,
            agent_id=agent_id,
            prompt_type=prompt_type,
            prompt=prompt,
        )
        data = await self._request("PUT", f"/v1/chain/{chain_id}/step/{step_number}", request)
        return self._message(data)

    @on_error(str)
    async def move_step(self, chain_id: str, old_step_number: int, new_step_number: int) -> str:
        request = MoveStepRequest(old_step_number=old_step_number, new_step_number=new_step_number)
        data = await self._request("PATCH", f"/v1/chain/{chain_id}/step/move", request)
        return self._message(data)

    @on_error(str)
    async def delete_step(self, chain_id: str, step_number: int) -> str:
        data = await self._request("DELETE", f"/v1/chain/{chain_id}/step/{step_number}")
        return self._message(data)

    @on_error(_as_none)
    async def get_chain_id_by_name(self, chain_name: str) -> Optional[str]:
        return self._find_id(await self.get_chains(), chain_name)

    # Prompts

    @on_error(_as_dict)
    async def add_prompt(self, prompt_name: str, prompt: str, prompt_category: str = "Default") -> Dict[str, Any]:
        request = PromptRequest(prompt_name=prompt_name, prompt=prompt, prompt_category=prompt_category)
        return await self._request("POST", "/v1/prompt", request)

    @on_error(_as_dict)
    async def get_prompt(self, prompt_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/v1/prompt/{prompt_id}")

    @on_error(_as_list)
    async def get_prompts(self, prompt_category: str = "Default") -> List[Any]:
        data = await self._request("GET", "/v1/prompts", params={"prompt_category": prompt_category})
        return self._unwrap(data, "prompts")

    @on_error(_as_dict)
    async def get_all_prompts(self) -> Dict[str, Any]:
        return await self._request("GET", "/v1/prompt/all")

    @on_error(_as_list)
    async def get_prompt_categories(self) -> List[Any]:
        data = await self._request("GET", "/v1/prompt/categories")
        return self._unwrap(data, "categories")

    @on_error(_as_list)
    async def get_prompts_by_category_id(self, category_id: str) -> List[Any]:
        data = await self._request("GET", f"/v1/prompt/category/{category_id}")
        return self._unwrap(data, "prompts")

    @on_error(_as_dict)
    async def get_prompt_args(self, prompt_id: str) -> Dict[str, Any]:
        """Get the template variables a prompt expects."""
        data = await self._request("GET", f"/v1/prompt/{prompt_id}/args")
        return self._unwrap(data, "prompt_args")

    @on_error(str)
    async def delete_prompt(self, prompt_id: str) -> str:
        data = await self._request("DELETE", f"/v1/prompt/{prompt_id}")
        return self._message(data)

    @on_error(str)
    async def update_prompt(self, prompt_id: str, prompt: str) -> str:
        data = await self._request("PUT", f"/v1/prompt/{prompt_id}", UpdatePromptRequest(prompt=prompt))
        return self._message(data)

    @on_error(str)
    async def rename_prompt(self, prompt_id: str, new_name: str) -> str:
        data = await self._request("PATCH", f"/v1/prompt/{prompt_id}", RenamePromptRequest(prompt_name=new_name))
        return self._message(data)

    # Extensions

    @on_error(_as_dict)
    async def get_extension_settings(self) -> Dict[str, Any]:
        data = await self._request("GET", "/v1/extensions/settings")
        return self._unwrap(data, "extension_settings")

    @on_error(_as_list)
    async def get_extensions(self) -> List[Any]:
        return await self._request("GET", "/v1/extensions")

    @on_error(_as_dict)
    async def get_command_args(self, command_name: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/v1/extensions/{command_name}/args")
        return self._unwrap(data, "command_args")

    # Memory

    @on_error(str)
    async def learn_text(
        self,
        agent_id: str,
        user_input: str,
        text: str,
        collection_number: Union[str, int] = "0",
    ) -> str:
        """
        Store text in an agent's memory.

        Args:
            agent_id: Agent whose memory receives the text
            user_input: Question or context the text answers
            text: Text to memorize
            collection_number: Memory collection (default: "0")

        Returns:
            Server confirmation message
        """
        request = LearnTextRequest(user_input=user_input, text=text, collection_number=str(collection_number))
        data = await self._request("POST", f"/v1/agent/{agent_id}/learn/text", request)
        return self._message(data)

    @on_error(str)
    async def learn_url(self, agent_id: str, url: str, collection_number: Union[str, int] = "0") -> str:
        request = LearnUrlRequest(url=url, collection_number=str(collection_number))
        data = await self._request("POST", f"/v1/agent/{agent_id}/learn/url", request)
        return self._message(data)

    @on_error(str)
    async def learn_file(
        self,
        agent_id: str,
        file_name: str,
        file_content: str,
        collection_number: Union[str, int] = "0",
    ) -> str:
        """Store a file in an agent's memory; file_content is base64 encoded."""
        request = LearnFileRequest(
            file_name=file_name,
            file_content=file_content,
            collection_number=str(collection_number),
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/learn/file", request)
        return self._message(data)

    @on_error(str)
    async def learn_github_repo(
        self,
        agent_id: str,
        github_repo: str,
        github_user: Optional[str] = None,
        github_token: Optional[str] = None,
        github_branch: str = "main",
        use_agent_settings: bool = False,
        collection_number: Union[str, int] = "0",
    ) -> str:
        """
        Store the contents of a GitHub repository in an agent's memory.

        Args:
            agent_id: Agent whose memory receives the repository
            github_repo: Repository as "owner/name"
            github_user: GitHub user for private repositories
            github_token: GitHub token for private repositories
            github_branch: Branch to read (default: "main")
            use_agent_settings: Use the GitHub credentials from the agent's settings
            collection_number: Memory collection (default: "0")

        Returns:
            Server confirmation message
        """
        request = LearnGitHubRequest(
            github_repo=github_repo,
            github_user=github_user,
            github_token=github_token,
            github_branch=github_branch,
            collection_number=str(collection_number),
            use_agent_settings=use_agent_settings,
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/learn/github", request)
        return self._message(data)

    @on_error(str)
    async def learn_arxiv(
        self,
        agent_id: str,
        query: str = "",
        arxiv_ids: str = "",
        max_results: int = 5,
        collection_number: Union[str, int] = "0",
    ) -> str:
        request = LearnArxivRequest(
            query=query,
            arxiv_ids=arxiv_ids,
            max_results=max_results,
            collection_number=str(collection_number),
        )
        data = await self._request("POST", f"/v1/agent/{agent_id}/learn/arxiv", request)
        return self._message(data)

    @on_error(str)
    async def agent_reader(
        self,
        agent_id: str,
        reader_name: str,
        data: Dict[str, Any],
        collection_number: Union[str, int] = "0",
    ) -> str:
        """
        Feed data to one of the agent's readers (e.g. "file", "github").

        The collection number is added to the reader data unless it
        already carries one.
        """
        payload = dict(data)
        payload.setdefault("collection_number", str(collection_number))
        response = await self._request("POST", f"/v1/agent/{agent_id}/reader/{reader_name}", ReaderRequest(data=payload))
        return self._message(response)

    @on_error(str)
    async def wipe_agent_memories(self, agent_id: str, collection_number: Union[str, int] = "0") -> str:
        data = await self._request("DELETE", f"/v1/agent/{agent_id}/memory/{collection_number}")
        return self._message(data)

    @on_error(str)
    async def delete_agent_memory(self, agent_id: str, memory_id: str, collection_number: Union[str, int] = "0") -> str:
        data = await self._request("DELETE", f"/v1/agent/{agent_id}/memory/{collection_number}/{memory_id}")
        return self._message(data)

    @on_error(_as_records)
    async def get_agent_memories(
        self,
        agent_id: str,
        user_input: str,
        limit: int = 5,
        min_relevance_score: float = 0.0,
        collection_number: Union[str, int] = "0",
    ) -> List[Dict[str, Any]]:
        """
        Query an agent's memory collection.

        Args:
            agent_id: Agent whose memory is searched
            user_input: Query text
            limit: Maximum memories returned
            min_relevance_score: Drop memories scoring below this
            collection_number: Memory collection (default: "0")

        Returns:
            Matching memories, most relevant first
        """
        request = MemoryQueryRequest(user_input=user_input, limit=limit, min_relevance_score=min_relevance_score)
        data = await self._request("POST", f"/v1/agent/{agent_id}/memory/{collection_number}/query", request)
        return self._unwrap(data, "memories")

    @on_error(_as_records)
    async def export_agent_memories(self, agent_id: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/v1/agent/{agent_id}/memory/export")
        return self._unwrap(data, "memories")

    @on_error(str)
    async def import_agent_memories(self, agent_id: str, memories: List[Dict[str, Any]]) -> str:
        data = await self._request(
            "POST",
            f"/v1/agent/{agent_id}/memory/import",
            ImportMemoriesRequest(memories=memories),
        )
        return self._message(data)

    @on_error(str)
    async def create_dataset(self, agent_id: str, dataset_name: str, batch_size: int = 4) -> str:
        """Build a training dataset from the agent's memories."""
        request = DatasetRequest(dataset_name=dataset_name, batch_size=batch_size)
        data = await self._request("POST", f"/v1/agent/{agent_id}/memory/dataset", request)
        return self._message(data)

    @on_error(_as_dict)
    async def train(
        self,
        agent_id: str,
        dataset_name: str = "dataset",
        model: str = "unsloth/mistral-7b-v0.2",
        max_seq_length: int = 16384,
        huggingface_output_path: str = "JoshXT/finetuned-mistral-7b-v0.2",
        private_repo: bool = True,
    ) -> Dict[str, Any]:
        """Start fine-tuning a model on a dataset created with create_dataset()."""
        request = TrainRequest(
            dataset_name=dataset_name,
            model=model,
            max_seq_length=max_seq_length,
            huggingface_output_path=huggingface_output_path,
            private_repo=private_repo,
        )
        return await self._request("POST", f"/v1/agent/{agent_id}/train", request)

    @on_error(_as_list)
    async def get_browsed_links(self, agent_id: str, collection_number: Union[str, int] = "0") -> List[str]:
        data = await self._request("GET", f"/v1/agent/{agent_id}/browsed_links/{collection_number}")
        return self._unwrap(data, "links")

    @on_error(str)
    async def delete_browsed_link(self, agent_id: str, link: str, collection_number: Union[str, int] = "0") -> str:
        request = BrowsedLinkRequest(link=link, collection_number=str(collection_number))
        data = await self._request("DELETE", f"/v1/agent/{agent_id}/browsed_links", request)
        return self._message(data)

    @on_error(_as_dict)
    async def get_memories_external_sources(self, agent_id: str, collection_number: Union[str, int]) -> Dict[str, Any]:
        data = await self._request("GET", f"/v1/agent/{agent_id}/memory/external_sources/{collection_number}")
        return self._unwrap(data, "external_sources")

    @on_error(str)
    async def delete_memory_external_source(self, agent_id: str, source: str, collection_number: Union[str, int]) -> str:
        request = ExternalSourceRequest(external_source=source, collection_number=str(collection_number))
        data = await self._request("DELETE", f"/v1/agent/{agent_id}/memory/external_source", request)
        return self._message(data)

    # Companies

    @on_error(_as_list)
    async def get_companies(self) -> List[Any]:
        return await self._request("GET", "/v1/companies")

    @on_error(_as_dict)
    async def create_company(self, name: str, agent_name: str, parent_company_id: Optional[str] = None) -> Dict[str, Any]:
        request = CompanyRequest(name=name, agent_name=agent_name, parent_company_id=parent_company_id)
        return await self._request("POST", "/v1/companies", request)

    @on_error(_as_dict)
    async def update_company(self, company_id: str, name: str) -> Dict[str, Any]:
        return await self._request("PUT", f"/v1/companies/{company_id}", UpdateCompanyRequest(name=name))

    @on_error(_as_dict)
    async def delete_company(self, company_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/v1/companies/{company_id}")

    @on_error(_as_dict)
    async def delete_user_from_company(self, company_id: str, user_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/v1/companies/{company_id}/users/{user_id}")

    @on_error(_as_list)
    async def get_invitations(self, company_id: Optional[str] = None) -> List[Any]:
        """List invitations, all of them or only those of one company."""
        path = f"/v1/invitations/{company_id}" if company_id else "/v1/invitations"
        data = await self._request("GET", path)
        return self._unwrap(data, "invitations")

    # Media

    @on_error(str)
    async def text_to_speech(self, agent_id: str, text: str) -> Any:
        """Synthesize speech with the agent's TTS provider and return the audio URL."""
        data = await self._request("POST", f"/v1/agent/{agent_id}/text_to_speech", TextToSpeechRequest(text=text))
        return self._message(data, "url")

    @on_error(_as_dict)
    async def transcribe_audio(
        self,
        file: str,
        model: str,
        language: Optional[str] = None,
        prompt: Optional[str] = None,
        response_format: str = "json",
        temperature: float = 0.0,
    ) -> Dict[str, Any]:
        """
        Transcribe audio with the agent named by model.

        Args:
            file: Base64 encoded audio
            model: Agent name used for transcription
            language: ISO-639-1 language of the audio
            prompt: Text guiding the transcription style
            response_format: "json", "text", "srt", "verbose_json" or "vtt"
            temperature: Sampling temperature

        Returns:
            Transcription response
        """
        request = TranscriptionRequest(
            file=file,
            model=model,
            language=language,
            prompt=prompt,
            response_format=response_format,
            temperature=temperature,
        )
        return await self._request("POST", "/v1/audio/transcriptions", request)

    @on_error(_as_dict)
    async def translate_audio(
        self,
        file: str,
        model: str,
        prompt: Optional[str] = None,
        response_format: str = "json",
        temperature: float = 0.0,
    ) -> Dict[str, Any]:
        """Translate audio into English text."""
        request = TranslationRequest(
            file=file,
            model=model,
            prompt=prompt,
            response_format=response_format,
            temperature=temperature,
        )
        return await self._request("POST", "/v1/audio/translations", request)

    @on_error(_as_dict)
    async def generate_image(
        self,
        prompt: str,
        model: str = "dall-e-3",
        n: int = 1,
        size: str = "1024x1024",
        response_format: str = "url",
    ) -> Dict[str, Any]:
        request = ImageGenerationRequest(
            prompt=prompt,
            model=model,
            n=n,
            size=size,
            response_format=response_format,
        )
        return await self._request("POST", "/v1/images/generations", request)
