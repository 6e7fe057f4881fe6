"""nftables command text that grants a source address temporary access to a port."""

from __future__ import annotations

NFT_TABLE = "key2port"
NFT_MAX_TTL = 3600


def allow_port_commands(port: int, ip: str, ttl: int) -> str:
    """Return the nft script that lets ``ip`` reach TCP ``port`` for ``ttl`` seconds."""
    ttl = min(ttl, NFT_MAX_TTL)
    table = NFT_TABLE
    return (
        f"add table inet {table}\n"
        f"add set inet {table} temp_allowed "
        "{ type ipv4_addr . inet_service; flags timeout; }\n"
        f"add chain inet {table} prerouting "
        "{ type filter hook prerouting priority -100; }\n"
        # flush the chain so the rule below is never duplicated
        f"flush chain inet {table} prerouting\n"
        f"add rule inet {table} prerouting ip saddr . tcp dport @temp_allowed meta mark set 0x99\n"
        f"add element inet {table} temp_allowed {{ {ip} . {port} timeout {ttl}s }}\n"
    )