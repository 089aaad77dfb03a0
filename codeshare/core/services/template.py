from pathlib import Path

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates"


class Renderer:
    _env: Environment | None = None

    @classmethod
    def initialize(cls, template_dir: str | Path = TEMPLATE_DIR) -> None:
        """
        Set up the Jinja2 environment used to render email templates.

        Rendering is async and HTML output is auto-escaped.

        Args:
            template_dir: The directory containing the template files.
        """
        cls._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            enable_async=True,
        )

    @classmethod
    async def render_template(cls, template_name: str, context: dict = {}) -> str:
        """
        Renders a template with the given context.

        Raises:
            TemplateNotFound: If the specified template cannot be found.
            RuntimeError: If the renderer has not been initialized.
        """
        if cls._env is None:
            raise RuntimeError("Renderer not initialized. Call initialize() first.")
        template = cls._env.get_template(template_name)
        return await template.render_async(**context)


__all__ = ["Renderer", "TEMPLATE_DIR"]
