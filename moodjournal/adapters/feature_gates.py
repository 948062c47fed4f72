"""
Feature gates without a database: a fixed set, or the MOODJOURNAL_PRO_FEATURES
environment variable (comma-separated feature ids, or 'all').
"""

import logging
import os
from typing import FrozenSet, Iterable, Optional, Union

from moodjournal.core.reports import ProFeature

logger = logging.getLogger(__name__)

PRO_FEATURES_ENV = "MOODJOURNAL_PRO_FEATURES"
ALL_FEATURES = "all"


class StaticFeatureGate:
    """Enables exactly the features it was built with."""

    def __init__(self, features: Iterable[Union[ProFeature, str]] = ()):
        self.enabled: FrozenSet[str] = frozenset(
            f.value if isinstance(f, ProFeature) else str(f) for f in features
        )

    @classmethod
    def unlocked(cls) -> 'StaticFeatureGate':
        return cls(ProFeature)

    def is_feature_enabled(self, feature_id: str) -> bool:
        return feature_id in self.enabled


class EnvFeatureGate(StaticFeatureGate):
    """Reads the enabled feature list from the environment once, at construction."""

    def __init__(self, value: Optional[str] = None):
        raw = value if value is not None else os.environ.get(PRO_FEATURES_ENV, "")
        ids = [part.strip().lower() for part in raw.split(",") if part.strip()]

        if ALL_FEATURES in ids:
            super().__init__(ProFeature)
        else:
            known = {f.value for f in ProFeature}
            unknown = [i for i in ids if i not in known]
            if unknown:
                logger.warning(f"[WARN] Ignoring unknown feature ids in {PRO_FEATURES_ENV}: {unknown}")
            super().__init__(i for i in ids if i in known)

        logger.info(f"[OK] Pro features enabled: {sorted(self.enabled) or 'none'}")
