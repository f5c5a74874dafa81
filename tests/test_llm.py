import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from repo_analyzer.agents.llm import LanguageModel, to_langchain_messages
from repo_analyzer.utils import format_response, parse_json_response, strip_code_fences


def _model(precise_replies=("{}",), creative_replies=("ok",)) -> LanguageModel:
    return LanguageModel(
        precise=FakeListChatModel(responses=list(precise_replies)),
        creative=FakeListChatModel(responses=list(creative_replies)),
    )


def test_to_langchain_messages_maps_roles():
    messages = to_langchain_messages([
        {"role": "system", "content": "s"},
        {"role": "user", "content": "u"},
        {"role": "model", "content": "m"},
        {"role": "assistant", "content": "a"},
    ])

    assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage, AIMessage]
    assert [m.content for m in messages] == ["s", "u", "m", "a"]


@pytest.mark.asyncio
async def test_complete_json_strips_code_fences():
    llm = _model(precise_replies=['```json\n{"files": ["README.md"], "reason": "docs"}\n```'])

    parsed = await llm.complete_json("system", "prompt")

    assert parsed == {"files": ["README.md"], "reason": "docs"}


@pytest.mark.asyncio
async def test_complete_json_rejects_prose():
    llm = _model(precise_replies=["Sure! Here are the files you asked for."])

    with pytest.raises(ValueError):
        await llm.complete_json("system", "prompt")


@pytest.mark.asyncio
async def test_stream_text_yields_the_full_answer_in_pieces():
    llm = _model(creative_replies=["Hello repository"])

    pieces = [piece async for piece in llm.stream_text([{"role": "user", "content": "hi"}])]

    assert len(pieces) > 1
    assert "".join(pieces) == "Hello repository"


def test_format_response_handles_content_blocks():
    message = AIMessage(content=[{"type": "text", "text": "a"}, {"type": "text", "text": "b"}])

    assert format_response(message) == "ab"
    assert format_response({"content": "c"}) == "c"


def test_strip_code_fences_without_language_tag():
    assert strip_code_fences("```\n[1, 2]\n```") == "[1, 2]"
    assert parse_json_response("```JSON\n{\"a\": 1}```") == {"a": 1}
