from __future__ import annotations
import os
from typing import Dict, Optional

import psutil


def _mountpoint_for(path: str) -> Optional[str]:
    best = None
    for p in psutil.disk_partitions(all=True):
        mp = p.mountpoint
        if not mp:
            continue
        mp_norm = os.path.abspath(mp)
        prefix = mp_norm if mp_norm.endswith(os.sep) else mp_norm + os.sep
        if path == mp_norm or path.startswith(prefix):
            if best is None or len(mp_norm) > len(best):
                best = mp_norm
    return best


def volume_usage(path: str) -> Optional[Dict]:
    """Usage of the filesystem holding ``path``, or None if psutil cannot tell."""
    ap = os.path.abspath(path)
    try:
        mountpoint = _mountpoint_for(ap) or ap
        u = psutil.disk_usage(ap)
    except OSError:
        return None
    return {
        "mountpoint": mountpoint,
        "total": int(u.total),
        "used": int(u.used),
        "free": int(u.free),
        "percent": float(u.percent),
    }
