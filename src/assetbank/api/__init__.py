"""Authenticated access to the asset service API."""

from assetbank.api.base import AuthenticatedRequestSender
from assetbank.api.permanent_token import PermanentTokenRequestHandler

__all__ = [
    "AuthenticatedRequestSender",
    "PermanentTokenRequestHandler",
]
