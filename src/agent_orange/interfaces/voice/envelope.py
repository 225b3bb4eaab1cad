"""Pydantic models for the voice-skill request envelope.

Only the fields this service reads are modelled; everything else in the
envelope is ignored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _EnvelopeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VoiceUser(_EnvelopeModel):
    user_id: Optional[str] = Field(None, alias="userId")


class VoiceApplication(_EnvelopeModel):
    application_id: Optional[str] = Field(None, alias="applicationId")


class VoiceSession(_EnvelopeModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    application: Optional[VoiceApplication] = None
    user: Optional[VoiceUser] = None


class VoiceSystem(_EnvelopeModel):
    api_access_token: Optional[str] = Field(None, alias="apiAccessToken")
    api_endpoint: Optional[str] = Field(None, alias="apiEndpoint")
    application: Optional[VoiceApplication] = None
    user: Optional[VoiceUser] = None


class VoiceContext(_EnvelopeModel):
    system: Optional[VoiceSystem] = Field(None, alias="System")


class VoiceIntent(_EnvelopeModel):
    name: str


class VoiceRequestBody(_EnvelopeModel):
    type: str
    request_id: Optional[str] = Field(None, alias="requestId")
    intent: Optional[VoiceIntent] = None


class VoiceEnvelope(_EnvelopeModel):
    version: str = "1.0"
    session: Optional[VoiceSession] = None
    context: Optional[VoiceContext] = None
    request: VoiceRequestBody

    @property
    def request_type(self) -> str:
        return self.request.type

    @property
    def intent_name(self) -> Optional[str]:
        return self.request.intent.name if self.request.intent else None

    @property
    def _system(self) -> Optional[VoiceSystem]:
        return self.context.system if self.context else None

    @property
    def user_id(self) -> Optional[str]:
        """Session user first, then the context user."""
        if self.session and self.session.user and self.session.user.user_id:
            return self.session.user.user_id
        system = self._system
        if system and system.user:
            return system.user.user_id
        return None

    @property
    def api_access_token(self) -> Optional[str]:
        system = self._system
        return system.api_access_token if system else None

    @property
    def api_endpoint(self) -> Optional[str]:
        system = self._system
        return system.api_endpoint if system else None

    @property
    def application_id(self) -> Optional[str]:
        if self.session and self.session.application and self.session.application.application_id:
            return self.session.application.application_id
        system = self._system
        if system and system.application:
            return system.application.application_id
        return None
