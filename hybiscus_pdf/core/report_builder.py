"""Render Hybiscus report definitions from Jinja2 JSON templates.

Subclass ReportBuilder per report and keep a template named after the class
next to it (InvoiceReport -> invoice_report.json.j2). Every public attribute
of the builder, including extra keyword arguments, is available to the
template:

    class InvoiceReport(ReportBuilder):
        def __init__(self, invoice, **options):
            self.invoice = invoice
            super().__init__(report_name="Invoice Report", **options)

    payload = InvoiceReport(invoice, template_dir="templates").generate_dict()
    client.request.build_report(payload)
"""

import json
import logging
import os
import re
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = os.path.dirname(__file__)
TEMPLATE_SUFFIX = ".json.j2"


def underscore(name: str) -> str:
    name = re.sub(r"([A-Z\d]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def humanize(name: str) -> str:
    return " ".join(part.capitalize() for part in underscore(name).split("_") if part)


class ReportBuilder:
    """Base class for JSON report definitions rendered from templates."""

    def __init__(self, report_name: Optional[str] = None, template_dir: Optional[str] = None, **template_params: Any):
        self.report_name = report_name or humanize(self.class_name)
        self.template_dir = template_dir or DEFAULT_TEMPLATE_DIR
        for key, value in template_params.items():
            setattr(self, key, value)

    @property
    def class_name(self) -> str:
        return type(self).__name__

    @property
    def template_name(self) -> str:
        return underscore(self.class_name)

    @property
    def template_path(self) -> str:
        return os.path.join(self.template_dir, self.template_name + TEMPLATE_SUFFIX)

    def template_context(self) -> Dict[str, Any]:
        return {key: value for key, value in vars(self).items() if not key.startswith("_")}

    def generate(self) -> str:
        """Render the template and return the report definition as JSON text.

        Raises:
            FileNotFoundError: If the template file does not exist.
            jinja2.UndefinedError: If the template uses an unknown variable.
        """
        path = self.template_path
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Template file not found: {path}")

        env = Environment(loader=FileSystemLoader(os.path.dirname(path)), undefined=StrictUndefined)
        template = env.get_template(os.path.basename(path))
        logger.debug("Rendering %s for %s", path, self.report_name)
        return template.render(**self.template_context())

    def generate_dict(self) -> Dict[str, Any]:
        """Render and decode the template, ready to pass to build_report()."""
        return json.loads(self.generate())
