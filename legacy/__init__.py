"""legacy-webapp - composition root of a server-rendered web application.

The ``legacy`` package holds the root tier: configuration, data access,
the component container and the non-web components. It never imports the
web framework; the web tier lives in ``legacy_web``.
"""

__version__ = "1.0.0"
__license__ = "MIT"
