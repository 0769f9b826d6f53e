"""Base logging functionality for tracing and debugging the alignment engine."""

import html
import logging
from functools import wraps
from pathlib import Path
from typing import Any, Callable, TypeVar, Union, cast

F = TypeVar("F", bound=Callable[..., Any])

CSS_LOG = """
body { font-family: sans-serif; margin: 2em; }
.section { border-top: 1px solid #ccc; margin-top: 1.5em; }
.subsection h4 { color: #444; margin-bottom: 0.3em; }
.info { margin: 0.2em 0; }
.error { color: #b00; }
table { border-collapse: collapse; }
th, td { border: 1px solid #ccc; padding: 4px 10px; }
"""


class AlgorithmLogger:
    """Base logger class for algorithm tracing with a text and an HTML stream."""

    def __init__(self, name: str):
        self.name = name
        self.disabled = False
        self._html_content = ['<div class="content">']
        self._section_open = False

        self.logger = logging.getLogger(name)

        # Only add a default handler once per logger name so that several
        # AlgorithmLogger instances sharing a name do not duplicate output.
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
            self.logger.propagate = False
        elif self.logger.level == logging.NOTSET:
            self.logger.setLevel(logging.INFO)

    def section(self, title: str):
        """Create a new section in the log."""
        if self.disabled:
            return
        if self._section_open:
            self._html_content.append("</section>")
            self._section_open = False

        self.logger.info(f"\n{'=' * 20} {title} {'=' * 20}\n")
        self._html_content.append(
            f'<section class="section"><h3>{html.escape(title)}</h3>'
        )
        self._section_open = True

    def subsection(self, title: str):
        """Create a new subsection in the log."""
        if self.disabled:
            return
        self.logger.info(f"\n{'-' * 15} {title} {'-' * 15}\n")
        self._html_content.append(
            f'<div class="subsection"><h4>{html.escape(title)}</h4></div>'
        )

    def info(self, message: str):
        """Log info message."""
        if self.disabled:
            return
        self.logger.info(message)
        self._html_content.append(f'<pre class="info">{html.escape(message)}</pre>')

    def error(self, message: str):
        """Log an error message."""
        if self.disabled:
            return
        self.logger.error(message)
        self._html_content.append(f'<p class="error">{html.escape(message)}</p>')

    def clear(self):
        """Clear all accumulated content."""
        self._html_content = ['<div class="content">']
        self._section_open = False

    def get_html_content(self) -> str:
        """Get the accumulated HTML body without mutating the buffers."""
        parts = list(self._html_content)
        if self._section_open:
            parts.append("</section>")
        parts.append("</div>")
        return "\n".join(parts)

    def write_html(self, path: Union[str, Path], title: str = "Mapping trace") -> Path:
        """Write the accumulated trace as a standalone HTML page."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        page = (
            "<!DOCTYPE html>\n<html><head><meta charset='utf-8'>"
            f"<title>{html.escape(title)}</title><style>{CSS_LOG}</style></head>"
            f"<body>\n{self.get_html_content()}\n</body></html>\n"
        )
        path.write_text(page, encoding="utf-8")
        return path

    def log_execution(self, func: F) -> F:
        """Decorator for logging function execution with type safety."""

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            self.section(f"Executing {func.__name__}")
            try:
                result = func(*args, **kwargs)
                self.info(f"{func.__name__} completed successfully")
                return result
            except Exception as e:
                self.error(f"Error in {func.__name__}: {str(e)}")
                raise

        return cast(F, wrapper)
