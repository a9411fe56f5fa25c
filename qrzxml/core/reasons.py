"""Mapping of server reason text to specific error kinds

The server reports failures as free text. Rules are matched in order by
case-insensitive substring; the first match builds the error. Callers can
register extra rules when the server wording changes.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from .exceptions import (
    ApiError,
    AuthenticationFailed,
    CallsignNotFound,
    ConnectionRefused,
    DxccNotFound,
    NoSessionKey,
    QrzError,
    RateLimitExceeded,
    SubscriptionRequired,
)

ErrorFactory = Callable[[str, Mapping[str, str]], QrzError]


@dataclass(frozen=True)
class ReasonRule:
    """Keywords plus the factory that builds the error for a match"""

    keywords: tuple[str, ...]
    build: ErrorFactory

    def matches(self, reason: str) -> bool:
        text = reason.lower()
        return any(keyword.lower() in text for keyword in self.keywords)


def _not_found(reason: str, params: Mapping[str, str]) -> QrzError:
    """Pick the not-found kind from the query that was sent"""
    if "callsign" in params:
        return CallsignNotFound(params["callsign"], reason)
    if "html" in params:
        return CallsignNotFound(params["html"], reason)
    if "dxcc" in params:
        return DxccNotFound(params["dxcc"], reason)
    return ApiError(reason)


DEFAULT_RULES: tuple[ReasonRule, ...] = (
    ReasonRule(("no session key",), lambda reason, _: NoSessionKey(reason)),
    ReasonRule(("not found",), _not_found),
    ReasonRule(("connection refused",), lambda reason, _: ConnectionRefused(reason)),
    ReasonRule(("subscription",), lambda reason, _: SubscriptionRequired(reason)),
    ReasonRule(
        ("too many", "limit exceeded", "rate limit"),
        lambda reason, _: RateLimitExceeded(reason),
    ),
    ReasonRule(("password", "username"), lambda reason, _: AuthenticationFailed(reason)),
)


class ReasonClassifier:
    """Ordered, extensible reason table"""

    def __init__(self, rules: Iterable[ReasonRule] | None = None):
        self._rules: list[ReasonRule] = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> list[ReasonRule]:
        return list(self._rules)

    def register(self, rule: ReasonRule, first: bool = True) -> None:
        """Add a rule ahead of (or after) the existing ones"""
        if first:
            self._rules.insert(0, rule)
        else:
            self._rules.append(rule)

    def classify(
        self,
        reason: str | None,
        params: Mapping[str, str] | None = None,
        default: type[QrzError] = ApiError,
    ) -> QrzError:
        """Return the error for `reason`; `default(reason)` when nothing matches"""
        reason = reason or "Unknown error"
        params = params or {}
        for rule in self._rules:
            if rule.matches(reason):
                return rule.build(reason, params)
        return default(reason)
