import logging
import os
import sys

from fabric import Application
from fabric.utils import get_relative_path

from selector.components.selection_models import ConfigurationError
from selector.components.selector_config import get_config
import actions.open_selector.open_selector_actions  # noqa: F401  registers the action
from selector.selectorLayer import SelectorLayer


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LFN_SELECTOR_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = get_config()
    except ConfigurationError as exc:
        print(f"lfn-selector: {exc}", file=sys.stderr)
        sys.exit(1)

    start_mode = sys.argv[1] if len(sys.argv) > 1 else None
    if start_mode and not config.enables(start_mode):
        print(f"lfn-selector: mode {start_mode!r} is not enabled", file=sys.stderr)
        sys.exit(1)
    layer = SelectorLayer(start_mode, config=config)
    app = Application("lfn-selector", layer)

    def set_css():
        app.set_stylesheet_from_file(
            get_relative_path("main.css"),
        )

    app.set_css = set_css

    app.set_css()

    app.run()
