import logging
import os
from datetime import datetime
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import settings

logger = logging.getLogger(__name__)


def format_completion_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def certificate_filename(serial_hash: str) -> str:
    return f"certificate-{serial_hash[:8]}.pdf"


class CertificateRenderer:
    _template_env = None
    template_name = "certificate.html"

    @classmethod
    def _get_template_dir(cls) -> str:
        return os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'templates')

    @classmethod
    def _get_template_env(cls):
        if cls._template_env is None:
            cls._template_env = Environment(
                loader=FileSystemLoader(cls._get_template_dir()),
                autoescape=select_autoescape(['html']),
                enable_async=False
            )
        return cls._template_env

    @classmethod
    def render_html(cls, certificate, platform_name: Optional[str] = None) -> str:
        """
        Render the certificate page from its snapshot fields only.

        :param certificate: Certificate model or schema
        :param platform_name: Footer text, defaults to PLATFORM_NAME
        :return: Rendered HTML
        """
        template = cls._get_template_env().get_template(cls.template_name)
        return template.render(
            user_name=certificate.user_name,
            course_title=certificate.course_title,
            completion_date=format_completion_date(certificate.completion_date),
            certificate_id=f"{certificate.serial_hash[:16]}...",
            platform_name=platform_name or settings.PLATFORM_NAME,
        )

    @classmethod
    def render_pdf(cls, certificate, platform_name: Optional[str] = None) -> bytes:
        """Single-page A4 landscape PDF."""
        # Loaded on first render; WeasyPrint needs the system Pango libraries.
        from weasyprint import HTML

        html = cls.render_html(certificate, platform_name=platform_name)
        try:
            return HTML(string=html, base_url=cls._get_template_dir()).write_pdf()
        except Exception as e:
            logger.error(f"Failed to render certificate {certificate.serial_hash[:16]}: {e}")
            raise
