"""
[IL-T004] tests.unit.test_llm_router
LLMRouter 단위 테스트 (mock 기반)

version: 1.1.0
created: 2026-10-02
modified: 2026-10-10
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from intentloop.core.config import LLMConfig
from intentloop.core.exceptions import ConfigError, LLMError
from intentloop.llm.router import LLMRouter


def _make_llm_response(content: str = "Hola!") -> MagicMock:
    """mock LLM 응답 생성."""
    response = MagicMock()
    response.model_dump.return_value = {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "model": "gpt-3.5-turbo",
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }
    return response


@pytest.fixture
def router(openai_key, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gm-test")
    config = LLMConfig(
        models=["gpt-3.5-turbo", "gemini/gemini-2.0-flash"],
        config_file="nonexistent.yaml",
    )
    return LLMRouter(config=config)


class TestLLMRouterInit:  # [IL-T004.1]
    def test_models_from_config(self, router):
        assert router.models == ["gpt-3.5-turbo", "gemini/gemini-2.0-flash"]

    def test_models_from_yaml(self, tmp_path, openai_key):
        yaml_file = tmp_path / "llm_config.yaml"
        yaml_file.write_text(
            "models:\n  - model: custom-model-1\n  - custom-model-2\n",
            encoding="utf-8",
        )
        config = LLMConfig(models=["default"], config_file=str(yaml_file))
        router = LLMRouter(config=config)
        assert router.models == ["custom-model-1", "custom-model-2"]

    def test_models_without_key_are_dropped(self, openai_key, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        config = LLMConfig(
            models=["anthropic/claude-3-haiku", "gpt-4o-mini", "ollama/llama3"],
            config_file="nonexistent.yaml",
        )
        router = LLMRouter(config=config)
        assert router.models == ["gpt-4o-mini", "ollama/llama3"]

    def test_malformed_yaml_raises_config_error(self, tmp_path, openai_key):
        yaml_file = tmp_path / "llm_config.yaml"
        yaml_file.write_text("models: gpt-3.5-turbo\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="리스트"):
            LLMRouter(LLMConfig(config_file=str(yaml_file)))

    def test_no_available_model_raises(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        config = LLMConfig(models=["gpt-3.5-turbo"], config_file="nonexistent.yaml")
        with pytest.raises(LLMError, match="사용 가능한 LLM 모델이 없습니다"):
            LLMRouter(config=config)


class TestLLMRouterComplete:  # [IL-T004.2]
    @pytest.mark.asyncio
    async def test_complete_success(self, router):
        mock_resp = _make_llm_response("¡Hola!")
        with patch(
            "intentloop.llm.router.litellm.acompletion",
            new_callable=AsyncMock,
            return_value=mock_resp,
        ):
            result = await router.complete([{"role": "user", "content": "hi"}])
            assert result["choices"][0]["message"]["content"] == "¡Hola!"
            assert result["usage"]["total_tokens"] == 30

    @pytest.mark.asyncio
    async def test_fallback_on_failure(self, router):
        """1차 모델 실패 시 2차 모델로 폴백."""
        mock_resp = _make_llm_response("from gemini")

        call_count = 0

        async def mock_acompletion(**kwargs):
            nonlocal call_count
            call_count += 1
            if kwargs["model"] == "gpt-3.5-turbo":
                raise Exception("OpenAI rate limited")
            return mock_resp

        with patch("intentloop.llm.router.litellm.acompletion", side_effect=mock_acompletion):
            result = await router.complete([{"role": "user", "content": "test"}])
            assert result["choices"][0]["message"]["content"] == "from gemini"
            assert call_count == 2

    @pytest.mark.asyncio
    async def test_all_models_fail_raises(self, router):
        """모든 모델 실패 시 LLMError."""
        with (
            patch(
                "intentloop.llm.router.litellm.acompletion",
                new_callable=AsyncMock,
                side_effect=Exception("all fail"),
            ),
            pytest.raises(LLMError, match="모든 LLM 호출 실패"),
        ):
            await router.complete([{"role": "user", "content": "test"}])

    @pytest.mark.asyncio
    async def test_specific_model_override(self, router):
        """특정 모델을 직접 지정하면 폴백 체인 무시."""
        mock_resp = _make_llm_response("specific")

        async def mock_acompletion(**kwargs):
            assert kwargs["model"] == "custom-model"
            return mock_resp

        with patch("intentloop.llm.router.litellm.acompletion", side_effect=mock_acompletion):
            result = await router.complete(
                [{"role": "user", "content": "test"}], model="custom-model"
            )
            assert result["choices"][0]["message"]["content"] == "specific"


class TestLLMRouterParams:  # [IL-T004.3]
    @pytest.mark.asyncio
    async def test_passes_classifier_params(self, router):
        mock = AsyncMock(return_value=_make_llm_response())
        with patch("intentloop.llm.router.litellm.acompletion", mock):
            await router.complete(
                [{"role": "user", "content": "test"}],
                temperature=0.1,
                max_tokens=200,
                response_format={"type": "json_object"},
            )

        kwargs = mock.call_args.kwargs
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 200
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["timeout"] == 30

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, router):
        mock = AsyncMock(return_value=_make_llm_response())
        with patch("intentloop.llm.router.litellm.acompletion", mock):
            await router.complete([{"role": "user", "content": "test"}], response_format=None)

        assert "response_format" not in mock.call_args.kwargs
        assert "temperature" not in mock.call_args.kwargs


class TestYAMLConfigChange:  # [IL-T004.4]
    """llm_config.yaml 변경만으로 모델 순서가 바뀌는지 확인."""

    def test_yaml_config_changes_model_order(self, tmp_path, openai_key):
        yaml_v1 = tmp_path / "v1.yaml"
        yaml_v1.write_text(
            "models:\n  - model: model-a\n  - model: model-b\n",
            encoding="utf-8",
        )
        router1 = LLMRouter(LLMConfig(config_file=str(yaml_v1)))
        assert router1.models == ["model-a", "model-b"]

        yaml_v2 = tmp_path / "v2.yaml"
        yaml_v2.write_text(
            "models:\n  - model: model-b\n  - model: model-a\n  - model: model-c\n",
            encoding="utf-8",
        )
        router2 = LLMRouter(LLMConfig(config_file=str(yaml_v2)))
        assert router2.models == ["model-b", "model-a", "model-c"]
