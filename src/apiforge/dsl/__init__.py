"""Builder calls used to write a design.

A design is a callable receiving a Design. Every body passed to a builder
call receives the same Design, whose methods act on the node currently
being defined.

Usage:
    def design(d):
        d.api("calc", lambda d: d.title("Calculator"))

    result = Pipeline().run(design)
"""

from apiforge.dsl.api import APIDSL
from apiforge.dsl.base import Body, DSLBase
from apiforge.dsl.http import HTTPDSL


class Design(APIDSL, HTTPDSL):
    """The complete builder surface bound to one root and context."""


__all__ = ["APIDSL", "Body", "DSLBase", "Design", "HTTPDSL"]
