"""
Wallet Session State Machine

Every change to a WalletSession goes through ``reduce``: a pure function from
(session, message) to the next session. Provider callbacks, connect requests
and fetch completions are all expressed as messages.
"""

from dataclasses import replace
from typing import Dict, Set, Union

from .errors import WalletErrorKind
from .models import (
    AccountAdopted,
    AccountInfoFetched,
    ConnectFailed,
    ConnectStarted,
    ErrorCleared,
    ErrorRaised,
    SessionCleared,
    SessionStatus,
    WalletSession,
)


SessionMessage = Union[
    ConnectStarted,
    AccountAdopted,
    ConnectFailed,
    SessionCleared,
    AccountInfoFetched,
    ErrorRaised,
    ErrorCleared,
]


class InvalidTransitionError(Exception):
    """Raised when a message would move the session along a forbidden edge."""

    def __init__(self, from_state: SessionStatus, to_state: SessionStatus):
        super().__init__(
            f"Invalid transition from {from_state.value} to {to_state.value}. "
            f"Allowed: {sorted(s.value for s in TRANSITIONS[from_state])}"
        )
        self.from_state = from_state
        self.to_state = to_state


# Errors never change the connection state on their own, so self-edges are
# allowed everywhere. There is no terminal state.
TRANSITIONS: Dict[SessionStatus, Set[SessionStatus]] = {
    SessionStatus.DISCONNECTED: {
        SessionStatus.DISCONNECTED,
        SessionStatus.CONNECTING,
        SessionStatus.CONNECTED,   # Event-driven adoption or discovery
    },
    SessionStatus.CONNECTING: {
        SessionStatus.CONNECTING,
        SessionStatus.CONNECTED,
        SessionStatus.DISCONNECTED,  # Rejected, failed or cleared
    },
    SessionStatus.CONNECTED: {
        SessionStatus.CONNECTED,     # Account switch, info fetched, reconnect
        SessionStatus.DISCONNECTED,
    },
}


def _same_account(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def is_stale(session: WalletSession, message: AccountInfoFetched) -> bool:
    """A fetch result is stale once the account or generation it was issued for is gone."""
    return (
        session.account is None
        or message.generation != session.generation
        or not _same_account(message.account, session.account)
    )


def _apply(session: WalletSession, message: SessionMessage) -> WalletSession:
    if isinstance(message, ConnectStarted):
        if session.status == SessionStatus.DISCONNECTED:
            return replace(session, status=SessionStatus.CONNECTING)
        return session

    if isinstance(message, AccountAdopted):
        if session.account is not None and _same_account(session.account, message.account):
            # Keep the signer already handed out for this account
            return replace(
                session,
                status=SessionStatus.CONNECTED,
                generation=session.generation + 1,
            )
        return WalletSession(
            status=SessionStatus.CONNECTED,
            account=message.account,
            signer=message.signer,
            error=session.error,
            error_kind=session.error_kind,
            generation=session.generation + 1,
        )

    if isinstance(message, ConnectFailed):
        status = SessionStatus.CONNECTED if session.account else SessionStatus.DISCONNECTED
        return replace(session, status=status, error=message.message, error_kind=message.kind)

    if isinstance(message, SessionCleared):
        keep = message.message is None
        return WalletSession(
            status=SessionStatus.DISCONNECTED,
            error=session.error if keep else message.message,
            error_kind=session.error_kind if keep else message.error_kind,
            generation=session.generation + 1,
        )

    if isinstance(message, AccountInfoFetched):
        if is_stale(session, message):
            return session
        updated = replace(session, network=message.network, balance=message.balance)
        if message.failed:
            updated = replace(
                updated,
                error=message.message,
                error_kind=WalletErrorKind.INFO_FETCH_FAILED,
            )
        return updated

    if isinstance(message, ErrorRaised):
        return replace(session, error=message.message, error_kind=message.kind)

    if isinstance(message, ErrorCleared):
        return replace(session, error=None, error_kind=None)

    raise TypeError(f"Unknown session message: {message!r}")


def reduce(session: WalletSession, message: SessionMessage) -> WalletSession:
    """Return the session that results from applying ``message``.

    Raises:
        InvalidTransitionError: if the resulting status is not reachable
    """
    next_session = _apply(session, message)
    if next_session.status not in TRANSITIONS[session.status]:
        raise InvalidTransitionError(session.status, next_session.status)
    return next_session
