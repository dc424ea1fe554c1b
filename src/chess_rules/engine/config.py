from __future__ import annotations

from dataclasses import dataclass


EP_POLICIES = ("always", "capturable")


@dataclass(frozen=True)
class RulesConfig:
    """Tunable rule-engine behaviour.

    Attributes:
        ep_policy (str): ``"always"`` records the skipped square after every
            two-square pawn advance; ``"capturable"`` records it only when an
            enemy pawn stands beside the landing square.
        reject_ambiguous (bool): Reject SAN that matches several legal origins
            instead of taking the lowest origin square.
    """

    ep_policy: str = "always"
    reject_ambiguous: bool = True

    def __post_init__(self) -> None:
        if self.ep_policy not in EP_POLICIES:
            raise ValueError(f"invalid ep_policy: {self.ep_policy!r}")


DEFAULT_CONFIG = RulesConfig()
