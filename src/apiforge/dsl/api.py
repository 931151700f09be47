"""Builder calls describing the API and its metadata.

Example:

    def design(d):
        def api_body(d):
            d.title("Calculator")          # Title used in documentation
            d.version("2.0")               # Version of the API
            d.terms_of_service("terms")    # Terms of use

            def contact(d):
                d.name("contact name")
                d.email("contact email")
                d.url("contact URL")
            d.contact(contact)

            d.server("https://calc.example.com")

        d.api("calc", api_body)
"""

from __future__ import annotations

from apiforge.dsl.base import Body, DSLBase
from apiforge.eval.context import TopExpr
from apiforge.expr.api import APIExpr, ContactExpr, DocsExpr, LicenseExpr, ServerExpr
from apiforge.expr.base import Described, Documented, Linked, Named, Served


class APIDSL(DSLBase):
    """API-level builder calls."""

    def api(self, name: str, body: Body | None = None) -> APIExpr | None:
        """Declare the API. A design declares exactly one, at the top level."""
        if not name:
            self.context.report_error("API first argument cannot be empty")
            return None
        if not isinstance(self.context.current(), TopExpr):
            self.context.incompatible_dsl("api")
            return None
        if self.root.api is not None:
            self.context.report_error('API "%s" is already defined', self.root.api.name)
            return None
        api = APIExpr(name=name)
        self.root.api = api
        self._run(body, api)
        return api

    def title(self, val: str) -> None:
        current = self.context.current()
        if isinstance(current, APIExpr):
            current.title = val
            return
        self.context.incompatible_dsl("title")

    def version(self, ver: str) -> None:
        current = self.context.current()
        if isinstance(current, APIExpr):
            current.version = ver
            return
        self.context.incompatible_dsl("version")

    def terms_of_service(self, terms: str) -> None:
        current = self.context.current()
        if isinstance(current, APIExpr):
            current.terms_of_service = terms
            return
        self.context.incompatible_dsl("terms_of_service")

    def description(self, text: str) -> None:
        current = self.context.current()
        if isinstance(current, Described):
            current.description = text
            return
        self.context.incompatible_dsl("description")

    def contact(self, body: Body) -> None:
        contact = ContactExpr()
        if not self._run(body, contact):
            return
        current = self.context.current()
        if isinstance(current, APIExpr):
            current.contact = contact
            return
        self.context.incompatible_dsl("contact")

    def license(self, body: Body) -> None:
        license = LicenseExpr()
        if not self._run(body, license):
            return
        current = self.context.current()
        if isinstance(current, APIExpr):
            current.license = license
            return
        self.context.incompatible_dsl("license")

    def docs(self, body: Body) -> None:
        """Attach external documentation to an API, service, method,
        attribute or file server.
        """
        docs = DocsExpr()
        if not self._run(body, docs):
            return
        current = self.context.current()
        if isinstance(current, Documented):
            current.docs = docs
            return
        self.context.incompatible_dsl("docs")

    def server(self, url: str, *bodies: Body) -> None:
        """Declare a host of the API or of the current service."""
        if len(bodies) > 1:
            self.context.report_error("too many arguments given to Server")
            return
        server = ServerExpr(url=url)
        if bodies and not self._run(bodies[0], server):
            return
        if not url:
            self.context.report_error("Server URL cannot be empty")
            return
        current = self.context.current()
        if isinstance(current, Served):
            current.servers.append(server)
            return
        self.context.incompatible_dsl("server")

    def name(self, name: str) -> None:
        """Set the contact or license name."""
        current = self.context.current()
        if isinstance(current, Named):
            current.name = name
            return
        self.context.incompatible_dsl("name")

    def email(self, email: str) -> None:
        """Set the contact email. Ignored outside of contact()."""
        current = self.context.current()
        if isinstance(current, ContactExpr):
            current.email = email

    def url(self, url: str) -> None:
        """Set the contact, license or documentation URL."""
        current = self.context.current()
        if isinstance(current, Linked):
            current.url = url
            return
        self.context.incompatible_dsl("url")
