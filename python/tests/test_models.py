"""
Unit tests for request models and configuration.
"""

import pytest
from pydantic import ValidationError

from agixt_client.config import DEFAULT_BASE_URL, ClientConfig
from agixt_client.models import (
    AgentRequest,
    ChainStepRequest,
    ErrorResponse,
    FeedbackRequest,
    LearnGitHubRequest,
    LoginRequest,
    RegisterUserRequest,
    RunChainRequest,
    TrainRequest,
)


class TestLoginRequest:
    """Tests for LoginRequest model."""

    def test_minimal_request(self):
        """Test login without MFA."""
        request = LoginRequest(username="ada", password="secret")
        assert request.mfa_token is None
        assert request.model_dump(exclude_none=True) == {"username": "ada", "password": "secret"}

    def test_missing_password(self):
        """Test required fields."""
        with pytest.raises(ValidationError):
            LoginRequest(username="ada")


class TestRegisterUserRequest:
    """Tests for RegisterUserRequest model."""

    def test_defaults(self):
        """Test default names and omitted optional fields."""
        request = RegisterUserRequest(email="ada@example.com", password="pw", confirm_password="pw")
        data = request.model_dump(exclude_none=True)
        assert data["first_name"] == ""
        assert data["last_name"] == ""
        assert "username" not in data
        assert "organization_name" not in data


class TestAgentRequest:
    """Tests for AgentRequest model."""

    def test_default_collections(self):
        """Test empty settings, commands and training URLs."""
        request = AgentRequest(agent_name="AGiXT")
        assert request.settings == {}
        assert request.commands == {}
        assert request.training_urls == []

    def test_defaults_not_shared(self):
        """Test that default containers are per instance."""
        first = AgentRequest(agent_name="One")
        first.settings["provider"] = "openai"
        second = AgentRequest(agent_name="Two")
        assert second.settings == {}


class TestRunChainRequest:
    """Tests for RunChainRequest model."""

    def test_defaults(self):
        """Test chain run defaults."""
        data = RunChainRequest().model_dump()
        assert data == {
            "prompt": "",
            "agent_override": "",
            "all_responses": False,
            "from_step": 1,
            "chain_args": {},
        }


class TestChainStepRequest:
    """Tests for ChainStepRequest model."""

    def test_prompt_accepts_any_shape(self):
        """Test that step prompts pass through unchanged."""
        prompt = {"command_name": "Web Search", "query": "{user_input}"}
        request = ChainStepRequest(step_number=2, agent_id="a1", prompt_type="Command", prompt=prompt)
        assert request.model_dump()["prompt"] == prompt


class TestMemoryRequests:
    """Tests for memory ingestion models."""

    def test_github_defaults(self):
        """Test GitHub ingestion defaults."""
        request = LearnGitHubRequest(github_repo="Josh-XT/AGiXT")
        assert request.github_branch == "main"
        assert request.collection_number == "0"
        assert request.use_agent_settings is False

    def test_train_defaults(self):
        """Test fine-tuning defaults."""
        request = TrainRequest()
        assert request.dataset_name == "dataset"
        assert request.model == "unsloth/mistral-7b-v0.2"
        assert request.max_seq_length == 16384
        assert request.private_repo is True


class TestFeedbackRequest:
    """Tests for FeedbackRequest model."""

    def test_serialization(self):
        """Test feedback serialization."""
        request = FeedbackRequest(user_input="q", message="a", feedback="good", positive=True)
        assert request.model_dump() == {
            "user_input": "q",
            "message": "a",
            "feedback": "good",
            "positive": True,
            "conversation_name": "",
        }


class TestErrorResponse:
    """Tests for ErrorResponse model."""

    def test_fastapi_detail(self):
        """Test FastAPI style errors."""
        assert ErrorResponse(detail="Not found").message == "Not found"

    def test_validation_detail(self):
        """Test structured detail is stringified."""
        error = ErrorResponse(detail=[{"loc": ["body", "agent_name"], "msg": "field required"}])
        assert "field required" in error.message

    def test_error_field(self):
        """Test error-field responses."""
        assert ErrorResponse(error="Invalid API key").message == "Invalid API key"

    def test_empty(self):
        """Test unknown error bodies."""
        assert ErrorResponse(**{"status": "failed"}).message is None


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        """Test default configuration."""
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.api_key is None
        assert config.timeout == 300.0
        assert config.verify_ssl is True

    def test_from_env(self, monkeypatch, tmp_path):
        """Test reading AGIXT_* variables."""
        monkeypatch.setenv("AGIXT_URI", "http://agixt:7437")
        monkeypatch.setenv("AGIXT_API_KEY", "env-key")
        monkeypatch.setenv("AGIXT_TIMEOUT", "60")
        monkeypatch.setenv("AGIXT_VERIFY_SSL", "false")

        config = ClientConfig.from_env(tmp_path / "missing.env")

        assert config.base_url == "http://agixt:7437"
        assert config.api_key == "env-key"
        assert config.timeout == 60.0
        assert config.verify_ssl is False

    def test_from_env_file(self, monkeypatch, tmp_path):
        """Test loading a .env file."""
        # Set then remove so monkeypatch restores the original state afterwards
        for name in ("AGIXT_URI", "AGIXT_API_KEY"):
            monkeypatch.setenv(name, "unset")
            monkeypatch.delenv(name)
        env_file = tmp_path / ".env"
        env_file.write_text("AGIXT_URI=http://from-file:7437\nAGIXT_API_KEY=file-key\n")

        config = ClientConfig.from_env(env_file)

        assert config.base_url == "http://from-file:7437"
        assert config.api_key == "file-key"

    def test_empty_api_key_is_none(self, monkeypatch, tmp_path):
        """Test that an empty key means no key."""
        monkeypatch.setenv("AGIXT_API_KEY", "")
        config = ClientConfig.from_env(tmp_path / "missing.env")
        assert config.api_key is None
