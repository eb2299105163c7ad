# mealdeal/src/application/region_resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from src.domain.entities import RegionResolution
from src.domain.errors import UnknownPostalCodeError
from src.domain.repositories import ReferenceDataRepo

log = logging.getLogger("app.region_resolver")


def clean_postal_code(postal_code: Optional[str]) -> Optional[str]:
    pc = (postal_code or "").strip()
    return pc or None


@dataclass(frozen=True)
class RegionResolver:
    repo: ReferenceDataRepo

    def resolve(self, postal_code: Optional[str]) -> RegionResolution:
        pc = clean_postal_code(postal_code)
        if pc is None:
            return RegionResolution(postal_code=None)
        region_ids = frozenset(int(r) for r in self.repo.regions_for_postal_code(pc))
        if not region_ids:
            log.info("Postal code %s maps to no region", pc)
        return RegionResolution(postal_code=pc, region_ids=region_ids)

    def require(self, postal_code: Optional[str]) -> RegionResolution:
        """Like resolve(), but a supplied code that maps nowhere is an input error."""
        res = self.resolve(postal_code)
        if res.unknown:
            raise UnknownPostalCodeError(res.postal_code or "")
        return res

    def for_chain(self, chain_id: int, postal_code: Optional[str]) -> FrozenSet[int]:
        """Regions of the postal code, or every region of the chain when that is empty."""
        res = self.resolve(postal_code)
        if res.region_ids:
            return res.region_ids
        return frozenset(int(r) for r in self.repo.regions_for_chain(chain_id))
