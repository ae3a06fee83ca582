from i18n_scanner.scanners.engine import scan_source, walk_tree
from i18n_scanner.scanners.syntax import ParseError

__all__ = ["ParseError", "scan_source", "walk_tree"]
