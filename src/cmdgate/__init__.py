"""cmdgate -- HTTP-triggered command execution gateway.

Each configured URL path maps to a pre-declared external command. Callers
may extend the command's arguments, environment, stdin or working
directory only where the route explicitly allows it, and receive the
result either in the response or later via a webhook.
"""

__version__ = "0.1.0"
