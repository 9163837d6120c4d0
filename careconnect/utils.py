# careconnect/utils.py
from typing import Any, Dict, Iterable, List, Mapping, Optional
import math
import re
from datetime import date, datetime

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

def to_id(doc: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Convierte _id -> id (str) y las fechas a strings ISO.
    Si doc es None, devuelve {}.
    Útil para reenviar documentos del marketplace tal cual al cliente.
    """
    if doc is None:
        return {}
    d = dict(doc)

    if "_id" in d:
        d["id"] = str(d.pop("_id"))

    for key, value in d.items():
        if isinstance(value, (datetime, date)):
            d[key] = value.isoformat()
        elif isinstance(value, Mapping):
            d[key] = to_id(value)
        elif isinstance(value, list):
            d[key] = [
                item.isoformat() if isinstance(item, (datetime, date))
                else to_id(item) if isinstance(item, Mapping)
                else item
                for item in value
            ]

    return d

# ==================== Identidades ====================

def _scalar_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, Mapping, list, tuple, set)):
        return None
    s = str(value).strip()
    return s or None

def resolve_id_candidates(entity: Any) -> List[str]:
    """
    Todos los ids con los que se puede identificar una entidad, como strings
    y sin duplicados: el propio valor si es escalar, o `_id`, `id`,
    `userId`, `userId._id` y `userId.id` si es un objeto.
    """
    found: List[str] = []

    def add(value: Any) -> None:
        s = _scalar_id(value)
        if s and s not in found:
            found.append(s)

    if not isinstance(entity, Mapping):
        add(entity)
        return found

    add(entity.get("_id"))
    add(entity.get("id"))
    user = entity.get("userId")
    if isinstance(user, Mapping):
        add(user.get("_id"))
        add(user.get("id"))
    else:
        add(user)
    return found

def looks_like_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_RE.match(value))

# ==================== Valores sueltos ====================

def first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """Primer valor no vacío entre varias claves alternativas."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None

def to_number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default

def unique(values: Iterable[str]) -> List[str]:
    out: List[str] = []
    for v in values:
        if v not in out:
            out.append(v)
    return out
