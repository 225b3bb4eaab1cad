"""Voice response documents."""

from typing import Any, Optional

RESPONSE_VERSION = "1.0"


def build_response(
    speech: Optional[str] = None,
    reprompt: Optional[str] = None,
    end_session: Optional[bool] = None,
) -> dict[str, Any]:
    """Build a response document. Omitted parts are left out entirely."""
    response: dict[str, Any] = {}
    if speech is not None:
        response["outputSpeech"] = {"type": "PlainText", "text": speech}
    if reprompt is not None:
        response["reprompt"] = {"outputSpeech": {"type": "PlainText", "text": reprompt}}
    if end_session is not None:
        response["shouldEndSession"] = end_session
    return {"version": RESPONSE_VERSION, "response": response}


def speak(speech: str) -> dict[str, Any]:
    """Say *speech* and close the session."""
    return build_response(speech, end_session=True)


def ask(speech: str, reprompt: str) -> dict[str, Any]:
    """Say *speech* and keep listening."""
    return build_response(speech, reprompt=reprompt, end_session=False)


def empty() -> dict[str, Any]:
    return build_response()
