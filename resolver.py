"""Client address resolution and the coarse location lookup."""

LOCALHOST = 'Localhost'
UNKNOWN_LOCATION = 'Unknown Location'

_LOOPBACK_ADDRESSES = {'', '127.0.0.1', '::1'}


def split_host_port(hostport):
    """Split "host:port" or "[host]:port" into (host, port).

    Raises ValueError when there is no port or the host part has
    unbracketed colons (a bare IPv6 address).
    """
    if hostport.startswith('['):
        end = hostport.find(']')
        if end < 0:
            raise ValueError(f'missing "]" in address {hostport!r}')
        rest = hostport[end + 1:]
        if not rest:
            raise ValueError(f'missing port in address {hostport!r}')
        if not rest.startswith(':') or ':' in rest[1:]:
            raise ValueError(f'unexpected text after host in address {hostport!r}')
        return hostport[1:end], rest[1:]

    i = hostport.rfind(':')
    if i < 0:
        raise ValueError(f'missing port in address {hostport!r}')
    host = hostport[:i]
    if ':' in host:
        raise ValueError(f'too many colons in address {hostport!r}')
    return host, hostport[i + 1:]


def resolve_ip(forwarded_for, remote_addr):
    # X-Forwarded-For is taken verbatim, no proxy allow-list
    ip = forwarded_for or remote_addr or ''
    if ':' in ip:
        try:
            host, _ = split_host_port(ip)
        except ValueError:
            return ip
        return host
    return ip


def resolve_request_ip(request):
    return resolve_ip(
        request.headers.get('X-Forwarded-For', ''),
        request.environ.get('REMOTE_ADDR', ''),
    )


def classify_location(ip):
    """Stand-in for a geolocation lookup: loopback or unknown."""
    if ip in _LOOPBACK_ADDRESSES:
        return LOCALHOST
    return UNKNOWN_LOCATION
