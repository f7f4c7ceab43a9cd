"""Network access between machines.

Rules are recorded on both ends of a connection::

    client = Connections("sg-client")
    server = Connections("sg-server")
    client.allow_to(server, Port.tcp(2049))

    server.ingress_rules()  # [("sg-client", "tcp", 2049)]
    client.egress_rules()   # [("sg-server", "tcp", 2049)]

Allowing the same peer and port twice records a single rule.
"""
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Port:

    protocol: str
    number: int

    def __post_init__(self):
        if self.protocol not in ("tcp", "udp"):
            raise ValueError(f"Unsupported protocol: {self.protocol!r}")
        if not 0 < self.number < 65536:
            raise ValueError(f"Port out of range: {self.number}")

    @classmethod
    def tcp(cls, number):
        return cls("tcp", number)

    @classmethod
    def udp(cls, number):
        return cls("udp", number)

    @classmethod
    def parse(cls, value):
        """Parse `tcp/1234` style strings."""
        protocol, _, number = value.partition("/")
        if not number:
            raise ValueError(f"Expected `<protocol>/<port>`, got {value!r}")
        return cls(protocol.strip().lower(), int(number))

    def __str__(self):
        return f"{self.protocol}/{self.number}"


class Connections:
    """The firewall rules of one network principal (e.g. a security group)."""

    def __init__(self, group_id):
        if not group_id:
            raise ValueError("`group_id` must be set.")
        self.group_id = group_id
        self._ingress = set()
        self._egress = set()

    def __repr__(self):
        return f"<Connections {self.group_id}>"

    def allow_to(self, other, port):
        """Allow traffic from this principal to `other` on `port`."""
        self._egress.add((other.group_id, port))
        other._ingress.add((self.group_id, port))

    def allow_from(self, other, port):
        other.allow_to(self, port)

    @staticmethod
    def _flatten(rules):
        return [
            (peer, port.protocol, port.number)
            for peer, port in sorted(rules)
        ]

    def ingress_rules(self):
        return self._flatten(self._ingress)

    def egress_rules(self):
        return self._flatten(self._egress)
