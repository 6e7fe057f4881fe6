"""Decoding of Ethernet, IPv4 and UDP headers from captured frames."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from ipaddress import IPv4Address

ETHER_LEN = 14
ETHER_ADDR_LEN = 6
IP_LEN = 20
UDP_LEN = 8
ETHERTYPE_IPV4 = 0x0800

_ETHER = struct.Struct(">6s6sH")
_IP = struct.Struct(">BBHHHBBH4s4s")
_UDP = struct.Struct(">HHHH")


class PacketParseError(ValueError):
    """Raised when a frame is not an Ethernet/IPv4/UDP packet."""


@dataclass(frozen=True)
class EthernetHeader:
    destination: bytes
    source: bytes
    ether_type: int


@dataclass(frozen=True)
class IpHeader:
    version: int
    header_length: int
    tos: int
    total_length: int
    ident: int
    fragment_offset: int
    ttl: int
    protocol: int
    checksum: int
    src: IPv4Address
    dst: IPv4Address


@dataclass(frozen=True)
class UdpHeader:
    source: int
    dest: int
    length: int
    checksum: int


@dataclass(frozen=True)
class FrameHeaders:
    """The parsed headers of a frame and the offset where the UDP payload starts."""

    ethernet: EthernetHeader
    ip: IpHeader
    udp: UdpHeader
    payload_offset: int


def parse_ethernet(data: bytes) -> EthernetHeader:
    """Decode an Ethernet header carrying IPv4."""
    if len(data) < ETHER_LEN:
        raise PacketParseError("frame shorter than Ethernet header")
    destination, source, ether_type = _ETHER.unpack_from(data)
    if ether_type != ETHERTYPE_IPV4:
        raise PacketParseError(f"not IPv4 (ethertype 0x{ether_type:04x})")
    return EthernetHeader(destination=destination, source=source, ether_type=ether_type)


def parse_ip(data: bytes) -> IpHeader:
    """Decode an IPv4 header, including its options length."""
    if len(data) < IP_LEN:
        raise PacketParseError("data shorter than IPv4 header")
    vhl, tos, total_length, ident, offset, ttl, protocol, checksum, src, dst = _IP.unpack_from(data)
    version = vhl >> 4
    if version != 4:
        raise PacketParseError(f"not IPv4 (version {version})")
    header_length = (vhl & 0x0F) * 4
    if header_length < IP_LEN:
        raise PacketParseError("IPv4 header length too small")
    if len(data) < header_length:
        raise PacketParseError("data shorter than IPv4 header length")
    return IpHeader(
        version=version,
        header_length=header_length,
        tos=tos,
        total_length=total_length,
        ident=ident,
        fragment_offset=offset,
        ttl=ttl,
        protocol=protocol,
        checksum=checksum,
        src=IPv4Address(src),
        dst=IPv4Address(dst),
    )


def parse_udp(data: bytes) -> UdpHeader:
    """Decode a UDP header."""
    if len(data) < UDP_LEN:
        raise PacketParseError("data shorter than UDP header")
    source, dest, length, checksum = _UDP.unpack_from(data)
    return UdpHeader(source=source, dest=dest, length=length, checksum=checksum)


def parse_headers(frame: bytes) -> FrameHeaders:
    """Decode the Ethernet, IPv4 and UDP headers at the start of a frame."""
    view = memoryview(frame)
    ethernet = parse_ethernet(view)
    ip = parse_ip(view[ETHER_LEN:])
    udp_start = ETHER_LEN + ip.header_length
    udp = parse_udp(view[udp_start:])
    return FrameHeaders(ethernet=ethernet, ip=ip, udp=udp, payload_offset=udp_start + UDP_LEN)