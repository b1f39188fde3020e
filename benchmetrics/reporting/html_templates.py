"""Shared HTML building blocks for the benchmark report pages.

Pages are self-contained: CSS is embedded and the only external asset is the
chart script loaded from a CDN.
"""

from __future__ import annotations

from html import escape
from typing import Any


class HTMLReportBuilder:
    """Shared HTML report builder with consistent styling."""

    CSS_STYLES = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            margin: 20px;
            background-color: #f5f5f5;
            color: #333;
        }
        .container {
            max-width: 1200px;
            margin: 0 auto;
            background-color: white;
            padding: 30px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        h1 {
            color: #2c3e50;
            border-bottom: 3px solid #3498db;
            padding-bottom: 10px;
        }
        h2 {
            color: #34495e;
            margin-top: 30px;
            margin-bottom: 15px;
        }
        nav {
            margin-bottom: 20px;
        }
        nav a {
            margin-right: 16px;
            color: #2980b9;
            text-decoration: none;
            font-weight: 600;
        }
        nav a.active {
            border-bottom: 2px solid #2980b9;
        }
        .timestamp {
            color: #7f8c8d;
            font-size: 14px;
        }
        table {
            width: 100%;
            border-collapse: collapse;
            margin-bottom: 20px;
        }
        th {
            background-color: #ecf0f1;
            padding: 12px;
            text-align: left;
            font-weight: 600;
            border-bottom: 2px solid #bdc3c7;
        }
        td {
            padding: 12px;
            border-bottom: 1px solid #ecf0f1;
        }
        tr:hover {
            background-color: #f9f9f9;
        }
        .metric-value {
            font-weight: 600;
            color: #2980b9;
        }
        .delta-positive {
            color: #27ae60;
        }
        .delta-negative {
            color: #e74c3c;
        }
        .delta-neutral {
            color: #95a5a6;
        }
        .alert {
            padding: 12px;
            margin-bottom: 15px;
            border-left: 4px solid #3498db;
            background-color: #f9f9f9;
        }
        .metric-grid {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 20px;
            margin-bottom: 30px;
        }
        .metric-card {
            background-color: #ecf0f1;
            padding: 20px;
            border-radius: 4px;
            border-left: 4px solid #3498db;
        }
        .metric-card-label {
            font-size: 12px;
            color: #7f8c8d;
            text-transform: uppercase;
            margin-bottom: 8px;
        }
        .metric-card-value {
            font-size: 24px;
            font-weight: bold;
            color: #2c3e50;
        }
        .grade-a-plus { color: #2ecc40; }
        .grade-a { color: #27ae60; }
        .grade-b { color: #a4a61d; }
        .grade-c { color: #dfb317; }
        .grade-d { color: #fe7d37; }
        .grade-f { color: #e05d44; }
        .chart-container {
            position: relative;
            height: 360px;
            margin-bottom: 30px;
        }
        .footer {
            margin-top: 40px;
            padding-top: 20px;
            border-top: 1px solid #ecf0f1;
            color: #95a5a6;
            font-size: 12px;
        }
    """

    NAV_LINKS = (("index.html", "Overview"), ("trends.html", "Trends"), ("detailed.html", "Detailed"))

    @staticmethod
    def format_cell(value: Any) -> str:
        if value is None:
            return "-"
        if isinstance(value, bool):
            return str(value)
        if isinstance(value, float):
            return f"{value:.2f}"
        if isinstance(value, int):
            return f"{value:,}"
        return escape(str(value))

    @staticmethod
    def create_table(
        data: list[dict[str, Any]], headers: list[str], title: str | None = None
    ) -> str:
        """Generate HTML table with consistent styling.

        Args:
            data: List of dictionaries representing table rows
            headers: List of column header names (also the row keys)
            title: Optional table title

        Returns:
            HTML table string
        """
        html_parts = []
        if title:
            html_parts.append(f"<h2>{escape(title)}</h2>")

        html_parts.append("<table>")
        html_parts.append("<tr>")
        for header in headers:
            html_parts.append(f"<th>{escape(header)}</th>")
        html_parts.append("</tr>")

        for row in data:
            html_parts.append("<tr>")
            for header in headers:
                cell = HTMLReportBuilder.format_cell(row.get(header))
                html_parts.append(f'<td class="metric-value">{cell}</td>')
            html_parts.append("</tr>")

        html_parts.append("</table>")
        return "\n".join(html_parts)

    @staticmethod
    def create_metric_card(
        label: str, value: str, delta: str | None = None, value_class: str | None = None
    ) -> str:
        """Generate metric card HTML.

        Args:
            label: Metric label
            value: Metric value
            delta: Optional delta value (e.g., "+5.2%")
            value_class: Optional extra CSS class for the value, e.g. a grade class

        Returns:
            HTML metric card string
        """
        value_classes = "metric-card-value" + (f" {value_class}" if value_class else "")
        html_parts = ['<div class="metric-card">']
        html_parts.append(f'<div class="metric-card-label">{escape(label)}</div>')
        html_parts.append(f'<div class="{value_classes}">{escape(value)}</div>')
        if delta:
            delta_class = "delta-neutral"
            if delta.startswith("+"):
                delta_class = "delta-positive"
            elif delta.startswith("-"):
                delta_class = "delta-negative"
            html_parts.append(f'<div class="{delta_class}">{escape(delta)}</div>')
        html_parts.append("</div>")
        return "\n".join(html_parts)

    @staticmethod
    def create_metric_grid(cards: list[str]) -> str:
        html_parts = ['<div class="metric-grid">']
        html_parts.extend(cards)
        html_parts.append("</div>")
        return "\n".join(html_parts)

    @staticmethod
    def create_alert(message: str) -> str:
        return f'<div class="alert">{escape(message)}</div>'

    @classmethod
    def create_nav(cls, active: str) -> str:
        links = []
        for href, label in cls.NAV_LINKS:
            css = ' class="active"' if href == active else ""
            links.append(f'<a href="{href}"{css}>{label}</a>')
        return "<nav>" + "".join(links) + "</nav>"

    @staticmethod
    def create_chart(canvas_id: str, chart_config_json: str) -> str:
        """Canvas plus inline script rendering a chart from a JSON config."""
        return f"""<div class="chart-container"><canvas id="{canvas_id}"></canvas></div>
<script>
new Chart(document.getElementById("{canvas_id}"), {chart_config_json});
</script>"""

    @classmethod
    def create_report_layout(
        cls,
        title: str,
        content: str,
        active_page: str,
        chart_script_url: str,
        timestamp: str | None = None,
    ) -> str:
        """Generate a full report page.

        Args:
            title: Page title
            content: Main page content HTML
            active_page: File name of this page, highlighted in the navigation
            chart_script_url: CDN URL of the chart library
            timestamp: Optional display timestamp

        Returns:
            Complete HTML page
        """
        timestamp_html = (
            f'<div class="timestamp">Generated: {escape(timestamp)}</div>' if timestamp else ""
        )

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>
{cls.CSS_STYLES}
    </style>
    <script src="{escape(chart_script_url)}"></script>
</head>
<body>
    <div class="container">
        <h1>{escape(title)}</h1>
        {cls.create_nav(active_page)}
        {timestamp_html}
        {content}
        <div class="footer">
            <p>Report generated by the benchmark metrics pipeline</p>
        </div>
    </div>
</body>
</html>"""

    @classmethod
    def create_not_found_page(cls, title: str) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Page not found - {escape(title)}</title>
    <style>
{cls.CSS_STYLES}
    </style>
</head>
<body>
    <div class="container">
        <h1>404 - Page not found</h1>
        <p>The requested page does not exist. Go back to the <a href="index.html">benchmark overview</a>.</p>
    </div>
</body>
</html>"""

    @staticmethod
    def create_robots_txt(site_url: str) -> str:
        return f"User-agent: *\nAllow: /\n\nSitemap: {site_url.rstrip('/')}/sitemap.xml\n"

    @staticmethod
    def create_sitemap(site_url: str, pages: list[str], lastmod: str) -> str:
        base = site_url.rstrip("/")
        urls = "\n".join(
            f"  <url>\n    <loc>{escape(base)}/{escape(page)}</loc>\n    <lastmod>{lastmod}</lastmod>\n  </url>"
            for page in pages
        )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
            f"{urls}\n"
            "</urlset>\n"
        )
