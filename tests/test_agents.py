import json

import httpx
import pytest
from langchain_core.messages import AIMessage

from app.agents.base import MoveAgent, RandomAgent, ScriptedAgent
from app.agents.config import AgentConfig, OrchestratorSettings, _get_env, configured_backend
from app.agents.factory import build_agents
from app.agents.langchain_agent import LangChainAgent
from app.agents.openrouter_agent import OpenRouterAgent
from app.agents.prompts import build_move_prompt, build_system_prompt
from app.errors import ParsingError, TransportError
from app.game.decay_intelligence import analyze
from app.models.agent_protocol import MoveRequest, RequestGameState
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameState
from app.state.turn_engine import TurnEngine
from app.validation.response_parser import extract_coordinate_token, is_coordinate

AGENT_ENV_VARS = (
    "AGENT_BACKEND",
    "openrouter_api_key",
    "OPENROUTER_API_KEY",
    "ANTHROPIC_API_KEY",
    "X_AGENT_MODEL",
    "O_AGENT_MODEL",
    "X_AGENT_NAME",
    "O_AGENT_NAME",
    "AGENT_REQUEST_TIMEOUT",
    "AGENT_MAX_RETRIES",
    "AGENT_BACKOFF_BASE",
    "AGENT_BACKOFF_FACTOR",
    "OPENROUTER_BASE_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in AGENT_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def make_request(moves=("B2",)):
    engine = TurnEngine()
    state = GameState(game_id="agents", status=GameStatus.PLAYING)
    for coordinate in moves:
        row, col = int(coordinate[1]) - 1, "ABC".index(coordinate[0])
        state = engine.apply_move(state, row, col).game_state
    return MoveRequest(
        game_id=state.game_id,
        acting_symbol=state.current_symbol,
        game_state=RequestGameState.from_game_state(state),
        decay_intelligence=analyze(state).model_dump(mode="json"),
    )


# ----- configuration -----

def test_get_env_returns_first_set(clean_env):
    """Test _get_env returns first environment variable that is set"""
    clean_env.setenv("TEST_VAR_1", "value1")
    clean_env.setenv("TEST_VAR_2", "value2")

    assert _get_env("TEST_VAR_MISSING", "TEST_VAR_1", "TEST_VAR_2") == "value1"


def test_get_env_returns_default_when_none_set():
    """Test _get_env returns default when no env vars are set"""
    assert _get_env("MISSING_VAR_1", "MISSING_VAR_2", default="default_value") == "default_value"
    assert _get_env("MISSING_VAR_1") is None


def test_agent_config_from_env_missing_api_key(clean_env):
    """Test AgentConfig.from_env raises when the backend needs a key"""
    with pytest.raises(RuntimeError, match="API key is required"):
        AgentConfig.from_env()


def test_agent_config_from_env_unknown_backend(clean_env):
    clean_env.setenv("AGENT_BACKEND", "carrier-pigeon")
    with pytest.raises(RuntimeError, match="AGENT_BACKEND"):
        AgentConfig.from_env()


def test_agent_config_from_env_with_all_vars(clean_env):
    clean_env.setenv("openrouter_api_key", "sk-test")
    clean_env.setenv("X_AGENT_MODEL", "model/x")
    clean_env.setenv("O_AGENT_MODEL", "model/o")
    clean_env.setenv("X_AGENT_NAME", "Ex")
    clean_env.setenv("AGENT_REQUEST_TIMEOUT", "5")
    clean_env.setenv("AGENT_MAX_RETRIES", "2")
    clean_env.setenv("AGENT_BACKOFF_BASE", "0.1")

    config = AgentConfig.from_env()

    assert config.backend == "openrouter"
    assert config.api_key == "sk-test"
    assert config.models == {PlayerSymbol.X: "model/x", PlayerSymbol.O: "model/o"}
    assert config.names[PlayerSymbol.X] == "Ex"
    assert config.names[PlayerSymbol.O] == "GPT-4"
    assert config.orchestrator.request_timeout == 5.0
    assert config.orchestrator.max_retries == 2
    assert config.orchestrator.backoff_base == 0.1


def test_agent_config_random_backend_needs_no_key(clean_env):
    clean_env.setenv("AGENT_BACKEND", "random")

    config = AgentConfig.from_env()

    assert config.backend == "random"
    assert not config.has_api_key
    assert configured_backend() == ("random", True)


def test_agent_config_anthropic_backend(clean_env):
    clean_env.setenv("AGENT_BACKEND", "anthropic")
    clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

    config = AgentConfig.from_env()

    assert config.api_key == "sk-ant-test"
    assert config.models[PlayerSymbol.X] == "claude-3-5-sonnet-latest"


def test_configured_backend_reports_missing_key(clean_env):
    assert configured_backend() == ("openrouter", False)
    clean_env.setenv("OPENROUTER_API_KEY", "sk-test")
    assert configured_backend() == ("openrouter", True)


def test_backoff_delay():
    settings = OrchestratorSettings(backoff_base=0.5, backoff_factor=2.0)
    assert [settings.backoff_delay(k) for k in (1, 2, 3)] == [0.5, 1.0, 2.0]


# ----- response parsing -----

@pytest.mark.parametrize(
    "raw, token",
    [
        ("B2", "B2"),
        ("  c3\n", "C3"),
        ("My move: A1.", "A1"),
        ("I'll play b3 because it blocks", "B3"),
        ("D4", "D4"),
        ("C4 is blocked, play B2", "B2"),
        ("D4 or E5, nothing else", "D4"),
    ],
)
def test_extract_coordinate_token(raw, token):
    assert extract_coordinate_token(raw) == token


@pytest.mark.parametrize("raw", [None, "", "   ", "center please", "A10", "AB2"])
def test_extract_coordinate_token_rejects(raw):
    with pytest.raises(ParsingError):
        extract_coordinate_token(raw)


def test_is_coordinate():
    assert is_coordinate("A1")
    assert not is_coordinate("D4")


# ----- local agents -----

@pytest.mark.asyncio
async def test_scripted_agent_replays_in_order():
    agent = ScriptedAgent(["A1", TransportError("down")])
    request = make_request()

    response = await agent.propose_move(request)
    assert response.coordinate == "A1"
    assert response.request_id == request.request_id

    with pytest.raises(TransportError):
        await agent.propose_move(request)
    with pytest.raises(RuntimeError, match="no scripted replies"):
        await agent.propose_move(request)


@pytest.mark.asyncio
async def test_random_agent_picks_an_empty_cell():
    agent = RandomAgent(seed=7)
    request = make_request(["A1", "B2", "C3"])

    response = await agent.propose_move(request)

    assert response.coordinate not in ("A1", "B2", "C3")
    assert is_coordinate(response.coordinate)
    assert isinstance(agent, MoveAgent)


def test_build_agents_random():
    agents = build_agents(AgentConfig(backend="random"))

    assert set(agents) == {PlayerSymbol.X, PlayerSymbol.O}
    assert all(isinstance(agent, RandomAgent) for agent in agents.values())
    assert agents[PlayerSymbol.X].name == "Claude"


def test_build_agents_openrouter():
    agents = build_agents(AgentConfig(api_key="sk-test"))
    assert isinstance(agents[PlayerSymbol.O], OpenRouterAgent)
    assert agents[PlayerSymbol.O].model == "openai/gpt-4o"


# ----- prompts -----

def test_system_prompt_has_personality():
    assert "analytical" in build_system_prompt(PlayerSymbol.X)
    assert "aggressive" in build_system_prompt(PlayerSymbol.O)


def test_move_prompt_describes_board_and_decay():
    prompt = build_move_prompt(make_request(["B2"]))

    assert "You play O" in prompt
    assert "2  . X ." in prompt
    assert "B2(X) - age 0, 7 turns left" in prompt
    assert "DECAY AWARENESS" in prompt
    assert "LAST MOVE: X put X on B2" in prompt
    assert prompt.endswith("Your move:")


# ----- OpenRouter agent -----

def openrouter_agent(handler):
    config = AgentConfig(api_key="sk-test", base_url="https://router.test/api/v1")
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouterAgent(PlayerSymbol.O, config, client=client)


@pytest.mark.asyncio
async def test_openrouter_agent_returns_raw_reply():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": " A3 \n"}}]})

    agent = openrouter_agent(handler)
    request = make_request()

    response = await agent.propose_move(request)

    assert response.coordinate == "A3"
    assert response.request_id == request.request_id
    assert seen["url"] == "https://router.test/api/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "openai/gpt-4o"
    assert seen["body"]["messages"][0]["role"] == "system"


@pytest.mark.asyncio
async def test_openrouter_agent_http_error_is_transport_error():
    agent = openrouter_agent(lambda request: httpx.Response(503, json={"error": "busy"}))

    with pytest.raises(TransportError) as exc_info:
        await agent.propose_move(make_request())
    assert exc_info.value.details["status_code"] == 503


@pytest.mark.asyncio
async def test_openrouter_agent_connection_error_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError, match="ConnectError"):
        await openrouter_agent(handler).propose_move(make_request())


@pytest.mark.asyncio
async def test_openrouter_agent_odd_payload_gives_empty_reply():
    agent = openrouter_agent(lambda request: httpx.Response(200, json={"choices": []}))

    response = await agent.propose_move(make_request())
    assert response.coordinate == ""


# ----- LangChain agent -----

class FakeChatModel:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.error:
            raise self.error
        return self.reply


@pytest.mark.asyncio
async def test_langchain_agent_returns_text():
    llm = FakeChatModel(reply=AIMessage(content="C1"))
    agent = LangChainAgent(PlayerSymbol.X, AgentConfig(backend="anthropic"), llm=llm)

    response = await agent.propose_move(make_request([]))

    assert response.coordinate == "C1"
    assert len(llm.messages) == 2


@pytest.mark.asyncio
async def test_langchain_agent_flattens_content_blocks():
    llm = FakeChatModel(reply=AIMessage(content=[{"type": "text", "text": "B1"}]))
    agent = LangChainAgent(PlayerSymbol.X, AgentConfig(backend="anthropic"), llm=llm)

    response = await agent.propose_move(make_request([]))
    assert response.coordinate == "B1"


@pytest.mark.asyncio
async def test_langchain_agent_failure_is_transport_error():
    llm = FakeChatModel(error=ValueError("overloaded"))
    agent = LangChainAgent(PlayerSymbol.X, AgentConfig(backend="anthropic"), llm=llm)

    with pytest.raises(TransportError, match="overloaded"):
        await agent.propose_move(make_request([]))
