import random
from dataclasses import dataclass, fields, replace
from typing import Any, Iterator, List, Mapping, Optional, Tuple

from .config import EnvReader
from .errors import InvalidAmneziaSetting

INT_KEYS = ("Jc", "Jmin", "Jmax", "S1", "S2", "H1", "H2", "H3", "H4")
STR_KEYS = ("I1", "I2", "I3", "I4", "I5")
# Rendering order of the obfuscation block
KEYS = INT_KEYS + STR_KEYS


@dataclass(frozen=True)
class AmneziaSettings:
    """AmneziaWG obfuscation parameters.

    S1, S2 and H1..H4 must match on both ends of a tunnel; Jc/Jmin/Jmax may
    differ per side.
    """

    enabled: bool = True
    Jc: Optional[int] = None
    Jmin: Optional[int] = None
    Jmax: Optional[int] = None
    S1: Optional[int] = None
    S2: Optional[int] = None
    H1: Optional[int] = None
    H2: Optional[int] = None
    H3: Optional[int] = None
    H4: Optional[int] = None
    I1: Optional[str] = None
    I2: Optional[str] = None
    I3: Optional[str] = None
    I4: Optional[str] = None
    I5: Optional[str] = None

    def __post_init__(self) -> None:
        for key in INT_KEYS:
            val = getattr(self, key)
            if val is None or isinstance(val, int):
                continue
            iv = _to_int(val)
            if iv is None:
                raise InvalidAmneziaSetting(key)
            object.__setattr__(self, key, iv)

    @classmethod
    def random(cls) -> "AmneziaSettings":
        return cls().with_recommended_defaults()

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "AmneziaSettings":
        reader = EnvReader(env)
        am = reader.with_prefix("AMNEZIA_")
        values: dict[str, Any] = {k: am.get(k.upper()) for k in KEYS}
        return cls(enabled=reader.get_bool("AMNEZIA_ENABLED", True), **values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AmneziaSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Set parameters in rendering order."""
        for key in KEYS:
            val = getattr(self, key)
            if val is not None:
                yield key, val

    def with_recommended_defaults(self) -> "AmneziaSettings":
        if not self.enabled:
            return self
        # Fill only missing values with randomized values in recommended ranges
        jc = self.Jc if self.Jc is not None else random.randint(4, 12)

        # Jmin/Jmax with constraints (Jmax > Jmin, both below 1280)
        jmin = self.Jmin if self.Jmin is not None else random.randint(8, 64)
        jmax = self.Jmax
        if jmax is None:
            low = max(jmin + 1, 40)
            high = 120
            if low > high:
                low = jmin + 1
                high = max(low, 150)
            jmax = random.randint(low, high)

        # S1/S2 in the recommended range 15..150, S2 != S1 + 56
        s1 = self.S1 if self.S1 is not None else random.randint(15, 150)
        s2 = self.S2
        if s2 is None:
            s2 = random.choice([x for x in range(15, 151) if x != s1 + 56])

        hs = [self.H1, self.H2, self.H3, self.H4]
        if any(h is None for h in hs):
            taken = {h for h in hs if h is not None}
            pool = [x for x in range(5, 1000) if x not in taken]
            fresh = iter(random.sample(pool, 4))
            hs = [h if h is not None else next(fresh) for h in hs]

        return replace(
            self,
            Jc=jc,
            Jmin=jmin,
            Jmax=jmax,
            S1=s1,
            S2=s2,
            H1=hs[0],
            H2=hs[1],
            H3=hs[2],
            H4=hs[3],
        )

    def _problems(self) -> Iterator[Tuple[str, str]]:
        if not self.enabled:
            return
        jc = self.Jc
        if jc is None or jc < 1 or jc > 128:
            yield "Jc", "amnezia.Jc must be an integer in [1,128]"
        jmin, jmax = self.Jmin, self.Jmax
        if jmin is None or jmax is None:
            yield ("Jmin" if jmin is None else "Jmax"), "amnezia.Jmin and amnezia.Jmax must be set"
        else:
            if not (jmin < 1280):
                yield "Jmin", "amnezia.Jmin must be < 1280"
            if not (jmin < jmax):
                yield "Jmin", "amnezia.Jmax must be > Jmin"
            if not (jmax <= 1280):
                yield "Jmax", "amnezia.Jmax must be <= 1280"
        s1, s2 = self.S1, self.S2
        if s1 is None:
            yield "S1", "amnezia.S1 must be set"
        elif not (s1 <= 1132):
            yield "S1", "amnezia.S1 must be <= 1132"
        if s2 is None:
            yield "S2", "amnezia.S2 must be set"
        elif not (s2 <= 1188):
            yield "S2", "amnezia.S2 must be <= 1188"
        if s1 is not None and s2 is not None and s1 + 56 == s2:
            yield "S1", "amnezia.S1 + 56 must not equal S2"
        hs = [self.H1, self.H2, self.H3, self.H4]
        for idx, hv in enumerate(hs, start=1):
            if hv is None:
                yield f"H{idx}", f"amnezia.H{idx} must be set and integer"
        ints = [h for h in hs if h is not None]
        if len(set(ints)) != len(ints):
            yield "H1/H2/H3/H4", "amnezia.H1..H4 must be unique"

    def validate(self) -> List[str]:
        return [msg for _, msg in self._problems()]

    def validate_or_raise(self) -> None:
        for name, _ in self._problems():
            raise InvalidAmneziaSetting(name)


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
