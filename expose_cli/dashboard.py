"""
Local web dashboard for expose.

GET  /                 HTML overview of exposed servers
GET  /api/status       state snapshot as JSON
POST /api/stop/{name}  stop a server (same lookup rules as `expose stop`)
"""

import html
import logging
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from .errors import ExposeError, NotFound
from .orchestrator import Orchestrator

logger = logging.getLogger("expose.dashboard")

DEFAULT_DASHBOARD_PORT = 8080

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>expose dashboard</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           background: #0a0a0a; color: #e0e0e0; padding: 2rem; }}
    h1 span {{ color: #f97316; }}
    .config-info code {{ color: #10b981; }}
    .stats {{ display: flex; gap: 1rem; margin: 1.5rem 0; }}
    .stat {{ background: #111; padding: 1rem 1.5rem; border-radius: 8px; border: 1px solid #222; }}
    .stat-value {{ font-size: 2rem; font-weight: 700; color: #f97316; }}
    table {{ width: 100%; border-collapse: collapse; background: #111; }}
    th, td {{ padding: 0.75rem; text-align: left; border-bottom: 1px solid #222; }}
    th {{ color: #888; text-transform: uppercase; font-size: 0.75rem; }}
    a {{ color: #3b82f6; text-decoration: none; }}
    .badge {{ padding: 0.2rem 0.6rem; border-radius: 9999px; background: #1e3a5f; font-size: 0.75rem; }}
    .empty {{ text-align: center; color: #666; }}
    .btn-danger {{ background: #dc2626; color: white; border: none; border-radius: 4px; padding: 0.4rem 0.8rem; }}
  </style>
</head>
<body>
  <h1><span>expose</span> dashboard</h1>
  <div class="config-info">
    Domain: <code>{domain}</code> &middot; Tunnel: <code>{tunnel}</code>
  </div>
  <div class="stats">
    <div class="stat"><div class="stat-value">{server_count}</div>Active Servers</div>
    <div class="stat"><div class="stat-value">{tunnel_count}</div>Tunnels</div>
    <div class="stat"><div class="stat-value">{managed_count}</div>Managed</div>
    <div class="stat"><div class="stat-value">{dedicated_count}</div>Dedicated</div>
  </div>
  <table>
    <thead>
      <tr><th>Subdomain</th><th>URL</th><th>Port</th><th>Framework</th><th>Mode</th>
          <th>Path</th><th>Started</th><th>Actions</th></tr>
    </thead>
    <tbody>
{rows}
    </tbody>
  </table>
  <script>
    async function stopServer(name) {{
      if (!confirm('Stop server ' + name + '?')) return;
      const res = await fetch('/api/stop/' + encodeURIComponent(name), {{ method: 'POST' }});
      if (res.ok) {{ location.reload(); }} else {{ alert('Failed to stop server'); }}
    }}
    setTimeout(() => location.reload(), 10000);
  </script>
</body>
</html>
"""


def _format_started(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def render_dashboard(orchestrator: Orchestrator) -> str:
    status = orchestrator.status()
    servers = list(status["servers"].items())

    rows = []
    for key, server in servers:
        esc = {name: html.escape(str(value)) for name, value in server.items()}
        rows.append(
            "      <tr>"
            f'<td><a href="{esc["url"]}" target="_blank">{esc["subdomain"]}</a></td>'
            f'<td><a href="{esc["url"]}" target="_blank">{esc["url"]}</a></td>'
            f"<td><code>{esc['port']}</code></td>"
            f'<td><span class="badge">{esc["serverType"]}</span></td>'
            f'<td><span class="badge">{esc["tunnelMode"]}</span></td>'
            f"<td><code>{esc['path']}</code></td>"
            f"<td>{html.escape(_format_started(server['started']))}</td>"
            f'<td><button class="btn-danger" onclick="stopServer(\'{html.escape(key)}\')">Stop</button></td>'
            "</tr>"
        )
    if not rows:
        rows.append('      <tr><td colspan="8" class="empty">No servers running</td></tr>')

    modes = [server["tunnelMode"] for _, server in servers]
    return PAGE_TEMPLATE.format(
        domain=html.escape(orchestrator.config.domain),
        tunnel=html.escape(orchestrator.config.tunnel_name),
        server_count=len(servers),
        tunnel_count=len(status["tunnels"]),
        managed_count=modes.count("managed"),
        dedicated_count=modes.count("dedicated"),
        rows="\n".join(rows),
    )


def create_app(orchestrator: Orchestrator) -> FastAPI:
    app = FastAPI(title="expose dashboard", docs_url=None, redoc_url=None)

    @app.get("/api/status")
    async def api_status():
        return JSONResponse(orchestrator.status())

    @app.post("/api/stop/{name}")
    def api_stop(name: str):
        try:
            result = orchestrator.stop(name)
        except NotFound as e:
            return JSONResponse({"error": e.message}, status_code=404)
        except ExposeError as e:
            logger.error("Failed to stop %s: %s", name, e.message)
            return JSONResponse({"error": "Failed to stop"}, status_code=500)
        return JSONResponse({"success": True, **result})

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return HTMLResponse(render_dashboard(orchestrator))

    return app


def run_dashboard(orchestrator: Orchestrator, port: int = DEFAULT_DASHBOARD_PORT) -> None:
    """Serve the dashboard on localhost until interrupted"""
    uvicorn.run(create_app(orchestrator), host="127.0.0.1", port=port, log_level="warning")
