"""Translation of transport failures into the error taxonomy."""

import inspect
import os

from ..exceptions import CallSite, KeeperError, error_for_code, is_recognized_code

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) + os.sep


def find_call_site() -> CallSite | None:
    """Return the innermost stack frame outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = os.path.abspath(frame.f_code.co_filename)
            if not filename.startswith(_PACKAGE_DIR):
                return CallSite(filename, frame.f_lineno, frame.f_code.co_name)
            frame = frame.f_back
        return None
    finally:
        del frame


class ErrorTranslator:
    """Maps failures carrying an outcome code to named errors.

    Example:
        try:
            raw = transport.get_data(path, None)
        except Exception as exc:
            raise translator.translate(exc, "get", path)
    """

    def translate(self, exc: BaseException, operation: str, path: str | None = None) -> KeeperError:
        """Return the named error for ``exc``.

        Failures without a recognized ``code`` are re-raised unchanged.
        """
        code = getattr(exc, "code", None)
        if not is_recognized_code(code):
            raise exc
        error = self.error_for(code, operation, path)
        error.__cause__ = exc
        return error

    def error_for(
        self,
        code: int,
        operation: str,
        path: str | None = None,
        call_site: CallSite | None = None,
    ) -> KeeperError | None:
        """Named error for an outcome code, or None if the code is unknown."""
        if not is_recognized_code(code):
            return None
        return error_for_code(code, path=path, operation=operation, call_site=call_site or find_call_site())
