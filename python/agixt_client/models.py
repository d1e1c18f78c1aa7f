"""
Request and error models for the AGiXT client.

Each request model matches one JSON body accepted by the AGiXT REST API.
Field names are the wire names.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# Auth


class LoginRequest(BaseModel):
    """Username/password login."""

    username: str = Field(..., description="Username or email address")
    password: str = Field(..., description="User's password")
    mfa_token: Optional[str] = Field(None, description="TOTP code if MFA is enabled")


class MagicLinkLoginRequest(BaseModel):
    """Legacy email + OTP login."""

    email: str
    token: str = Field(..., description="TOTP code from authenticator app")


class RegisterUserRequest(BaseModel):
    """New user registration."""

    email: str
    password: str
    confirm_password: str
    first_name: str = ""
    last_name: str = ""
    username: Optional[str] = None
    organization_name: Optional[str] = None


class MfaTokenRequest(BaseModel):
    mfa_token: str


class DisableMfaRequest(BaseModel):
    password: Optional[str] = None
    mfa_token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class SetPasswordRequest(BaseModel):
    """Password for users without one (e.g. social login users)."""

    new_password: str
    confirm_password: str


class OAuth2LoginRequest(BaseModel):
    code: str = Field(..., description="Authorization code returned by the provider")
    referrer: Optional[str] = Field(None, description="Redirect URI used for the code")


# Agents


class AgentRequest(BaseModel):
    """Agent creation or settings update."""

    agent_name: str = Field(..., description="Agent name")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Provider settings")
    commands: Dict[str, bool] = Field(default_factory=dict, description="Enabled commands")
    training_urls: List[str] = Field(default_factory=list, description="URLs to learn from")


class ImportAgentRequest(BaseModel):
    agent_name: str
    settings: Dict[str, Any] = Field(default_factory=dict)
    commands: Dict[str, bool] = Field(default_factory=dict)


class RenameRequest(BaseModel):
    new_name: str


class AgentCommandsRequest(BaseModel):
    commands: Dict[str, bool]


class PersonaRequest(BaseModel):
    persona: str


# Conversations


class ConversationRequest(BaseModel):
    """New conversation, optionally seeded with messages."""

    conversation_name: str
    agent_id: str
    conversation_content: List[Dict[str, Any]] = Field(default_factory=list)


class RenameConversationRequest(BaseModel):
    new_conversation_name: str = "-"


class ConversationMessageRequest(BaseModel):
    role: str = Field(..., description="Message author, e.g. 'USER' or the agent name")
    message: str


class UpdateMessageRequest(BaseModel):
    new_message: str


# Prompting and commands


class PromptAgentRequest(BaseModel):
    prompt_name: str
    prompt_args: Dict[str, Any] = Field(default_factory=dict)


class ToggleCommandRequest(BaseModel):
    command_name: str
    enable: bool


class ExecuteCommandRequest(BaseModel):
    command_name: str
    command_args: Dict[str, Any] = Field(default_factory=dict)
    conversation_name: str = ""


class PlanTaskRequest(BaseModel):
    """Task planning request."""

    user_input: str
    websearch: bool = False
    websearch_depth: int = 3
    conversation_name: str = ""
    log_user_input: bool = True
    log_output: bool = True
    enable_new_command: bool = True


class FeedbackRequest(BaseModel):
    """Positive or negative feedback on an agent response."""

    user_input: str
    message: str
    feedback: str
    positive: bool = True
    conversation_name: str = ""


# Chains


class RunChainRequest(BaseModel):
    """Chain execution, from a given step."""

    prompt: str = Field("", description="User input passed to the chain")
    agent_override: str = Field("", description="Agent to run every step with")
    all_responses: bool = False
    from_step: int = 1
    chain_args: Dict[str, Any] = Field(default_factory=dict)


class RunChainStepRequest(BaseModel):
    prompt: str
    agent_override: str = ""
    chain_args: Dict[str, Any] = Field(default_factory=dict)


class ChainNameRequest(BaseModel):
    chain_name: str


class ImportChainRequest(BaseModel):
    chain_name: str
    steps: Any = Field(..., description="Chain steps as exported by the server")


class ChainStepRequest(BaseModel):
    """Chain step definition used by add and update."""

    step_number: int
    agent_id: str
    prompt_type: str = Field(..., description="One of 'Prompt', 'Chain' or 'Command'")
    prompt: Any = Field(..., description="Prompt arguments for the step")


class MoveStepRequest(BaseModel):
    old_step_number: int
    new_step_number: int


# Prompts


class PromptRequest(BaseModel):
    prompt_name: str
    prompt: str
    prompt_category: str = "Default"


class UpdatePromptRequest(BaseModel):
    prompt: str


class RenamePromptRequest(BaseModel):
    prompt_name: str


# Memory


class LearnTextRequest(BaseModel):
    user_input: str
    text: str
    collection_number: str = "0"


class LearnUrlRequest(BaseModel):
    url: str
    collection_number: str = "0"


class LearnFileRequest(BaseModel):
    file_name: str
    file_content: str = Field(..., description="Base64 encoded file content")
    collection_number: str = "0"


class LearnGitHubRequest(BaseModel):
    """GitHub repository ingestion."""

    github_repo: str = Field(..., description="Repository as 'owner/name'")
    github_user: Optional[str] = None
    github_token: Optional[str] = None
    github_branch: str = "main"
    collection_number: str = "0"
    use_agent_settings: bool = False


class LearnArxivRequest(BaseModel):
    query: str = ""
    arxiv_ids: str = Field("", description="Comma separated arXiv IDs")
    max_results: int = 5
    collection_number: str = "0"


class ReaderRequest(BaseModel):
    data: Dict[str, Any]


class MemoryQueryRequest(BaseModel):
    user_input: str
    limit: int = 5
    min_relevance_score: float = 0.0


class ImportMemoriesRequest(BaseModel):
    memories: List[Dict[str, Any]]


class DatasetRequest(BaseModel):
    dataset_name: str
    batch_size: int = 4


class TrainRequest(BaseModel):
    """Fine-tuning job on a previously created dataset."""

    dataset_name: str = "dataset"
    model: str = "unsloth/mistral-7b-v0.2"
    max_seq_length: int = 16384
    huggingface_output_path: str = "JoshXT/finetuned-mistral-7b-v0.2"
    private_repo: bool = True


class BrowsedLinkRequest(BaseModel):
    link: str
    collection_number: str = "0"


class ExternalSourceRequest(BaseModel):
    external_source: str
    collection_number: str = "0"


# Companies


class CompanyRequest(BaseModel):
    name: str
    agent_name: str
    parent_company_id: Optional[str] = None


class UpdateCompanyRequest(BaseModel):
    name: str


# Media


class TextToSpeechRequest(BaseModel):
    text: str


class TranscriptionRequest(BaseModel):
    """Audio transcription, OpenAI compatible."""

    file: str = Field(..., description="Base64 encoded audio")
    model: str
    language: Optional[str] = None
    prompt: Optional[str] = None
    response_format: str = "json"
    temperature: float = 0.0


class TranslationRequest(BaseModel):
    file: str
    model: str
    prompt: Optional[str] = None
    response_format: str = "json"
    temperature: float = 0.0


class ImageGenerationRequest(BaseModel):
    prompt: str
    model: str = "dall-e-3"
    n: int = 1
    size: str = "1024x1024"
    response_format: str = "url"


class ErrorResponse(BaseModel):
    """Error response from the API."""

    detail: Optional[Any] = Field(None, description="FastAPI error detail")
    error: Optional[str] = Field(None, description="Error message")

    @property
    def message(self) -> Optional[str]:
        """Best human-readable error text."""
        if self.detail is not None:
            return self.detail if isinstance(self.detail, str) else str(self.detail)
        return self.error
