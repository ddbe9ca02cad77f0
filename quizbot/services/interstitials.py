import enum
from typing import Dict, Iterable, Iterator, Optional, Tuple


class InterstitialKind(str, enum.Enum):
    A = "a"
    B = "b"
    C = "c"


Binding = Tuple[str, str, InterstitialKind]


class InterstitialBindings:
    """
    Lookup table of interstitial screens shown between two specific questions.

    The forward map answers "is there a screen between from -> to", the inverse
    map tells where Continue and Back lead from a given screen.
    """

    def __init__(self, bindings: Iterable[Binding]):
        self._forward: Dict[Tuple[str, str], InterstitialKind] = {}
        self._inverse: Dict[InterstitialKind, Tuple[str, str]] = {}

        for from_id, to_id, kind in bindings:
            kind = InterstitialKind(kind)
            if (from_id, to_id) in self._forward:
                raise ValueError(f"Transition {from_id} -> {to_id} is bound more than once")
            if kind in self._inverse:
                raise ValueError(f"Interstitial {kind.name} is bound to more than one transition")
            self._forward[(from_id, to_id)] = kind
            self._inverse[kind] = (from_id, to_id)

    def kind_for(self, from_id: str, to_id: str) -> Optional[InterstitialKind]:
        return self._forward.get((from_id, to_id))

    def forward_target(self, kind: InterstitialKind) -> Optional[str]:
        pair = self._inverse.get(kind)
        return pair[1] if pair else None

    def reverse_target(self, kind: InterstitialKind) -> Optional[str]:
        pair = self._inverse.get(kind)
        return pair[0] if pair else None

    def __iter__(self) -> Iterator[Binding]:
        for (from_id, to_id), kind in self._forward.items():
            yield from_id, to_id, kind

    def __len__(self) -> int:
        return len(self._forward)


DEFAULT_BINDINGS = InterstitialBindings([
    ("q1", "q2", InterstitialKind.A),
    ("q3", "q4", InterstitialKind.B),
    ("q5", "q6", InterstitialKind.C),
])
