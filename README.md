# key2port

key2port implements single packet authorization. A client sends one UDP
packet signed with its Ed25519 key; the receiving side checks the packet's
signature, timestamp and nonce and, if all is well, grants the client's
address access to the requested TCP port for a limited time. The grant is
expressed as nftables commands that add an element with a timeout to a set.

## Installation

```
pip install key2port
```

For running the tests:

```
pip install "key2port[test]"
pytest
```

## The client

```
k2p-client [OPTIONS] user@target
```

`user` is hashed into the client id the receiver looks the public key up
by, and `target` is the IPv4 address of the receiver. The packet is signed
with the Ed25519 secret read from the file `key` in the current directory.
That file must hold the raw key bytes: either a 32-byte seed or a 64-byte
secret key (seed followed by public key). The packet goes to a random UDP
port between 1025 and 65535; the receiver recognises it by its content,
not by its port.

Options:

| Option                | Meaning                                | Default |
|-----------------------|----------------------------------------|---------|
| `-h`, `--help`        | print the usage text and exit          |         |
| `-v`, `--version`     | print the version and exit             |         |
| `-p PORT`, `--p PORT` | TCP port to ask for                    | 4444    |
| `-t TTL`, `--ttl TTL` | how many seconds the port should open  | 120     |

Run with no arguments, the command prints the usage text and exits with
status 0. It exits with status 1 when the target is missing or not of the
form `user@host`, when the key file cannot be read or has the wrong size,
or when the packet cannot be sent.

Example:

```
k2p-client -p 22 --ttl 300 alice@192.0.2.10
```

From Python, `key2port.client.main(argv)` runs the same command line and
returns the exit status. The pieces are also available separately:

- `parse_target("alice@192.0.2.10")` returns `("alice", "192.0.2.10")` and
  raises `ValueError` for anything else;
- `random_port()` picks a destination port between 1025 and 65535;
- `create_packet(port, ttl, client_id, flags, signing_key, now=None)`
  returns a complete signed packet with a fresh random nonce;
- `send_udp_packet(host, packet, port=None)` sends it and returns the
  destination port used.

## The packet

Every packet is a 40-byte header, a payload and a 64-byte Ed25519
signature over header and payload together. The header holds, in network
byte order:

- the magic number `0x53504100`
- the protocol version (1)
- 16 bits of flags
- an 8-byte client id: the first 8 bytes of the 32-byte BLAKE2b hash of
  the user name (`key2port.strutil.strnhash(name, 8)`)
- a 32-bit Unix timestamp
- a 16-byte nonce
- the payload length (at most 512 bytes)

The payload is a 32-bit time to live followed by a 16-bit port, both
little-endian (`SpaPayload(ttl, port).pack()`, `unpack_payload(data)`).

`key2port.spa` builds and checks packets:

```python
from key2port.spa import SpaHeader, SpaPayload, build_packet, parse_header, verify_packet

header = parse_header(packet)
payload = verify_packet(packet, public_key, header)  # raises SpaError on failure
```

`SpaHeader.serialize()` gives the 40 header bytes; `build_packet(header,
payload, signing_key)` appends the signature. Signing keys may be a
`nacl.signing.SigningKey`, a 32-byte seed or a 64-byte secret key; public
keys a `nacl.signing.VerifyKey` or 32 raw bytes.

## Checking packets

`key2port.server.process_frame(frame, store, config, now=None)` takes one
captured Ethernet frame and returns an `Authorization(ip, port, ttl)` when
all of these hold, and `None` otherwise:

1. it is an Ethernet / IPv4 / UDP frame (`key2port.packet_parser.parse_headers`);
2. its SPA header parses and its client id has a key in the store;
3. its magic, version, payload length and signature are valid;
4. its timestamp lies within `config.replay_window` seconds of `now`;
5. its nonce has not been seen before; it is then recorded as seen.

`format_auth_line(authorization, now)` gives the line to log for it, such
as `[1700000000] status=SUCCESS allow=192.0.2.7:22 ttl=300`.

### Keys and nonces

`key2port.db.KeyStore(path)` is a SQLite database (use `":memory:"` for a
throwaway one) with a table of public keys and a table of seen nonces:

- `insert_key(name, public_key)` stores a 32-byte public key under the id
  derived from `name` and returns that id;
- `select_key(key_id)` returns the key or `None`;
- `truncate_keys()` removes all keys;
- `nonce_seen(nonce)` and `insert_seen(nonce, timestamp)` keep the replay
  record; inserting a nonce twice raises `sqlite3.IntegrityError`.

`KeyStore` is a context manager and also has `close()`.

### Configuration

`key2port.config.load_config(path)` reads, and `parse_config(text)`
parses, a file of `name = value` lines into a `Config`:

```
interface = eth0
sqlite_db = /var/lib/key2port/key2port.db
keys = /etc/key2port/keys
log_auth = /var/log/key2port/auth.log
log_error = /var/log/key2port/error.log
replay_window = 30
ttl = 120
min_capture_port = 1025
max_capture_port = 65535
```

Unknown lines are ignored and missing settings keep their empty or zero
defaults.

### Firewall commands

`key2port.nft.allow_port_commands(port, ip, ttl)` returns the nftables
script that creates the `key2port` table, set and prerouting chain if
needed and adds `ip . port` to the set with a timeout. The timeout is
capped at 3600 seconds.

### Logs

`key2port.authlog.AuthLogs(auth_path, error_path)` appends to the two log
files (either may be `None`) and echoes each message: `auth(message)` to
standard output, `error(message)` to standard error. It is a context
manager and also has `close()`.

## What is not included

The package provides the checks but no running server: it does not capture
packets from a network interface, does not run nftables commands (it only
produces their text), and has no command for the receiving side. It does
not read OpenSSH key files either: public keys go into the `KeyStore` as
32 raw bytes, the `keys` setting is read but not used, and the client's
`key` file must hold raw key bytes rather than an OpenSSH private key.