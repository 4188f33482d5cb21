"""Service to load the hospital directory from YAML files into database."""
import logging
from pathlib import Path

import yaml
from sqlalchemy.orm import Session

from bloodbridge.config import get_settings
from bloodbridge.models.hospital import Hospital

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("slug", "name", "address", "city", "state", "zipcode", "phone", "email")
OPTIONAL_KEYS = ("website", "latitude", "longitude", "formatted_address")


def load_hospital_configs(db: Session, hospitals_dir: Path | None = None) -> list[Hospital]:
    """Load all hospital YAML files and upsert them by slug.

    Returns list of loaded/updated Hospital objects.
    """
    if hospitals_dir is None:
        hospitals_dir = get_settings().hospitals_dir
    if not hospitals_dir.exists():
        logger.warning(f"Hospital configs directory not found: {hospitals_dir}")
        return []

    loaded = []

    for yaml_file in sorted(hospitals_dir.glob("*.yaml")):
        try:
            hospital = _load_single_hospital(db, yaml_file)
            if hospital:
                loaded.append(hospital)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load hospital config from {yaml_file}: {e}")

    db.commit()
    logger.info(f"Loaded {len(loaded)} hospital configs")
    return loaded


def _load_single_hospital(db: Session, yaml_path: Path) -> Hospital | None:
    """Load a single hospital from a YAML file."""
    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        logger.warning(f"Hospital config {yaml_path} is not a mapping; skipping")
        return None

    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        logger.warning(f"Hospital config {yaml_path} missing keys: {', '.join(missing)}")
        return None

    values = {key: data[key] for key in REQUIRED_KEYS}
    values.update({key: data.get(key) for key in OPTIONAL_KEYS})
    values["zipcode"] = str(values["zipcode"])
    values["phone"] = str(values["phone"])
    values["emergency_available"] = 1 if data.get("emergency_available", True) else 0
    values["verified"] = 1 if data.get("verified", False) else 0

    existing = db.query(Hospital).filter(Hospital.slug == values["slug"]).first()
    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        logger.debug(f"Updated hospital: {values['slug']}")
        return existing

    hospital = Hospital(**values)
    db.add(hospital)
    logger.debug(f"Created hospital: {values['slug']}")
    return hospital
