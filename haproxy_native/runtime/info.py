"""Parsing of the runtime API ``show info typed`` output."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class ProcessInfoItem:
    """Information reported by one HAProxy process."""

    version: str = ""
    release_date: datetime.date | None = None
    nbthread: int | None = None
    processes: int | None = None
    process_num: int | None = None
    pid: int | None = None
    uptime: int | None = None
    mem_max_mb: int | None = None
    pool_alloc_mb: int | None = None
    pool_used_mb: int | None = None
    pool_failed: int | None = None
    ulimit_n: int | None = None
    max_sock: int | None = None
    max_conn: int | None = None
    hard_max_conn: int | None = None
    curr_conns: int | None = None
    cum_conns: int | None = None
    cum_req: int | None = None
    max_ssl_conns: int | None = None
    curr_ssl_conns: int | None = None
    cum_ssl_conns: int | None = None
    max_pipes: int | None = None
    pipes_used: int | None = None
    pipes_free: int | None = None
    conn_rate: int | None = None
    conn_rate_limit: int | None = None
    max_conn_rate: int | None = None
    sess_rate: int | None = None
    sess_rate_limit: int | None = None
    max_sess_rate: int | None = None
    ssl_rate: int | None = None
    ssl_rate_limit: int | None = None
    max_ssl_rate: int | None = None
    ssl_frontend_key_rate: int | None = None
    ssl_frontend_max_key_rate: int | None = None
    ssl_frontend_session_reuse: int | None = None
    ssl_backend_key_rate: int | None = None
    ssl_backend_max_key_rate: int | None = None
    ssl_cache_lookups: int | None = None
    ssl_cache_misses: int | None = None
    compress_bps_in: int | None = None
    compress_bps_out: int | None = None
    compress_bps_rate_lim: int | None = None
    zlib_mem_usage: int | None = None
    max_zlib_mem_usage: int | None = None
    tasks: int | None = None
    run_queue: int | None = None
    idle_pct: int | None = None
    node: str = ""
    stopping: int | None = None
    jobs: int | None = None
    unstoppable: int | None = None
    listeners: int | None = None
    active_peers: int | None = None
    connected_peers: int | None = None
    dropped_logs: int | None = None
    busy_polling: int | None = None
    failed_resolutions: int | None = None
    total_bytes_out: int | None = None
    bytes_out_rate: int | None = None


@dataclass
class ProcessInfo:
    """Result of asking one runtime API for its process information."""

    runtime_api: str = ""
    info: ProcessInfoItem | None = None
    error: str = ""


# Numbered field of ``show info typed`` -> integer attribute it fills.
_INT_FIELDS = {
    "3": "nbthread",
    "4": "processes",
    "5": "process_num",
    "6": "pid",
    "8": "uptime",
    "9": "mem_max_mb",
    "10": "pool_alloc_mb",
    "11": "pool_used_mb",
    "12": "pool_failed",
    "13": "ulimit_n",
    "14": "max_sock",
    "15": "max_conn",
    "16": "hard_max_conn",
    "17": "curr_conns",
    "18": "cum_conns",
    "19": "cum_req",
    "20": "max_ssl_conns",
    "21": "curr_ssl_conns",
    "22": "cum_ssl_conns",
    "23": "max_pipes",
    "24": "pipes_used",
    "25": "pipes_free",
    "26": "conn_rate",
    "27": "conn_rate_limit",
    "28": "max_conn_rate",
    "29": "sess_rate",
    "30": "sess_rate_limit",
    "31": "max_sess_rate",
    "32": "ssl_rate",
    "33": "ssl_rate_limit",
    "34": "max_ssl_rate",
    "35": "ssl_frontend_key_rate",
    "36": "ssl_frontend_max_key_rate",
    "37": "ssl_frontend_session_reuse",
    "38": "ssl_backend_key_rate",
    "39": "ssl_backend_max_key_rate",
    "40": "ssl_cache_lookups",
    "41": "ssl_cache_misses",
    "42": "compress_bps_in",
    "43": "compress_bps_out",
    "44": "compress_bps_rate_lim",
    "45": "zlib_mem_usage",
    "46": "max_zlib_mem_usage",
    "47": "tasks",
    "48": "run_queue",
    "49": "idle_pct",
    "52": "stopping",
    "53": "jobs",
    "54": "unstoppable",
    "55": "listeners",
    "56": "active_peers",
    "57": "connected_peers",
    "58": "dropped_logs",
    "59": "busy_polling",
    "60": "failed_resolutions",
    "61": "total_bytes_out",
    "62": "bytes_out_rate",
}


def _parse_date(text: str) -> datetime.date | None:
    try:
        return datetime.date.fromisoformat(text.replace("/", "-"))
    except ValueError:
        return None


def parse_info(info: str) -> ProcessInfoItem:
    """Parse ``show info typed`` output; unparsable values are left unset."""
    item = ProcessInfoItem()
    for line in info.split("\n"):
        fields = line.split(":")
        field_id = fields[0].split(".")[0].strip()
        if len(fields) < 4:
            continue
        value = fields[3]
        if field_id == "1":
            item.version = value
        elif field_id == "2":
            release = _parse_date(value)
            if release is not None:
                item.release_date = release
        elif field_id == "50":
            item.node = value
        elif field_id in _INT_FIELDS and _INT_RE.fullmatch(value):
            setattr(item, _INT_FIELDS[field_id], int(value))
    return item