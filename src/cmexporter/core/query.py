"""Typed builders for upstream timeseries requests."""

from cmexporter.core.models import ConnectionConfig

TIMESERIES_PATH = "/timeseries"


def scoped_expression(expression: str, scope: str | None = None) -> str:
    """Embed an optional cluster scope in a query expression.

    The upstream API expects the scope inside the expression itself, so
    ``SELECT LAST(x)`` scoped to ``C1`` becomes
    ``SELECT LAST(x)[clusterName=C1]``.

    Args:
        expression: Query expression in the manager's query language.
        scope: Cluster name, or None/empty for an unscoped query.

    Returns:
        The expression with the scope clause appended when given.
    """
    expression = expression.strip()
    if not scope:
        return expression
    return f"{expression}[clusterName={scope}]"


def timeseries_url(config: ConnectionConfig) -> str:
    """Return the timeseries endpoint URL for the given connection."""
    return config.base_url + TIMESERIES_PATH


def timeseries_params(expression: str, scope: str | None = None) -> dict[str, str]:
    """Return query-string parameters for one timeseries request.

    Values are left unencoded; the HTTP client URL-encodes them.
    """
    return {"query": scoped_expression(expression, scope)}
