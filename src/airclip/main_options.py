"""Click parameter types for the server options."""
import ipaddress

import click


class IPAddressParamType(click.ParamType):
    """Click parameter accepting a literal IPv4 or IPv6 address."""

    name = "ip"

    def convert(self, value, param, ctx):
        """Return the normalized address text or fail with a usage error."""
        try:
            return str(ipaddress.ip_address(value))
        except ValueError:
            self.fail(f"{value!r} is not a valid IP address", param, ctx)


IP_ADDRESS = IPAddressParamType()
