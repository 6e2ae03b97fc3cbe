"""HTML pages for the dashboard. Plain string assembly, everything escaped."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import List, Sequence
from urllib.parse import quote

from jsonstub.data.route_table import RouteMapping

_STYLE = """
:root{--card:#12192a;--accent:#ffb703;--accent2:#219ebc;--text:#e5ecf4;--muted:#93a3b8;--line:#1f2a44}
*{box-sizing:border-box}
body{margin:0;font-family:system-ui,-apple-system,sans-serif;color:var(--text);
background:linear-gradient(180deg,#0b0f1a 0%,#0d1222 100%)}
a{color:var(--accent);text-decoration:none}a:hover{text-decoration:underline}
header,.section,.tabs{max-width:1000px;margin:0 auto;padding:0 24px 16px}
header{padding-top:32px}
h1{margin:0;font-size:30px}h2{margin:0 0 8px;font-size:20px}
p,.muted{color:var(--muted)}
.grid{display:grid;gap:16px;grid-template-columns:repeat(auto-fit,minmax(260px,1fr));max-width:1000px;margin:0 auto;padding:0 24px 32px}
.card{background:var(--card);border:1px solid #1e2842;border-radius:14px;padding:16px;margin-bottom:16px}
.tag{display:inline-block;padding:2px 8px;border-radius:999px;background:rgba(255,183,3,.15);color:var(--accent);font-size:12px;margin:8px 0}
.pill{display:inline-block;margin-right:8px;padding:4px 10px;border-radius:999px;background:rgba(33,158,188,.15);color:var(--accent2);font-size:12px}
ul{list-style:none;padding:0;margin:8px 0 0}li{padding:6px 0;border-bottom:1px dashed var(--line)}li:last-child{border-bottom:none}
input[type=file],input[type=text],select,textarea{width:100%;padding:10px;border-radius:10px;border:1px solid var(--line);background:#0d1425;color:var(--text);margin-bottom:8px}
button{background:var(--accent);border:none;color:#111;padding:8px 14px;border-radius:10px;font-weight:600;cursor:pointer}
form.inline{display:inline}form.inline button{padding:2px 8px;font-size:12px}
.log{background:#0d1425;border:1px solid var(--line);border-radius:12px;padding:10px;max-height:220px;overflow:auto;font-family:ui-monospace,Menlo,Consolas,monospace;font-size:12px}
.log-line{padding:4px 0;border-bottom:1px dashed var(--line)}
.tab-btn{border:1px solid var(--line);background:#0d1425;color:var(--text);padding:8px 14px;border-radius:999px;cursor:pointer}
.tab-btn.active{background:var(--accent);color:#111}
.tab-panel{display:none}.tab-panel.active{display:block}
"""

_SCRIPT = """
(function(){
  const logEl = document.getElementById('log');
  const es = new EventSource('/events');
  es.onmessage = (e) => {
    const line = document.createElement('div');
    line.className = 'log-line';
    line.textContent = e.data;
    logEl.appendChild(line);
    while (logEl.children.length > %(history)d) { logEl.removeChild(logEl.firstChild); }
    logEl.scrollTop = logEl.scrollHeight;
  };
  const buttons = document.querySelectorAll('.tab-btn');
  const panels = document.querySelectorAll('.tab-panel');
  buttons.forEach(btn => btn.addEventListener('click', () => {
    buttons.forEach(b => b.classList.toggle('active', b === btn));
    panels.forEach(p => p.classList.toggle('active', p.id === btn.dataset.tab));
  }));
})();
"""


@dataclass
class IndexView:
    refresh_endpoint: str
    ping_endpoint: str
    mappings: List[RouteMapping]
    log_patterns: List[str]
    log_enabled: bool
    log_lines: List[str]
    files: List[str]
    folders: List[str]
    history_size: int = 200


def _page(title: str, body: str, script: str = "") -> str:
    tail = f"<script>{script}</script>" if script else ""
    return (
        f'<!doctype html><html><head><meta charset="utf-8"><title>{escape(title)}</title>'
        f"<style>{_STYLE}</style></head><body>{body}{tail}</body></html>"
    )


def _json_url(rel_path: str) -> str:
    return escape(quote(f"/json/{rel_path}"))


def _file_link(rel_path: str) -> str:
    url = _json_url(rel_path)
    return f'<a href="{url}">{escape(rel_path)}</a>'


def _mapping_items(mappings: Sequence[RouteMapping], removable: bool) -> str:
    if not mappings:
        return '<li class="muted">No mappings configured</li>'
    items = []
    for m in mappings:
        remove = ""
        if removable:
            remove = (
                '<form class="inline" method="post" action="/config/route-mapping/delete">'
                f'<input type="hidden" name="method" value="{escape(m.method)}">'
                f'<input type="hidden" name="path" value="{escape(m.path)}">'
                "<button type=\"submit\">remove</button></form>"
            )
        items.append(
            f'<li><span class="pill">{escape(m.method)}</span> <code>{escape(m.path)}</code>'
            f" &rarr; {_file_link(m.file)} {remove}</li>"
        )
    return "".join(items)


def _endpoint_form(title: str, action: str, current: str) -> str:
    return (
        f'<div class="card"><h2>{escape(title)}</h2>'
        f'<p class="muted">Current: <code>{escape(current)}</code></p>'
        f'<form method="post" action="{action}">'
        f'<input type="text" name="path" value="{escape(current)}" required>'
        '<button type="submit">Save</button></form></div>'
    )


def render_index(view: IndexView) -> str:
    parts: List[str] = [
        '<header><span class="pill">API stub</span><h1>JSON endpoints</h1>'
        "<p>Every file under <code>json/</code> is served at "
        "<code>/json/&lt;folder&gt;/&lt;file&gt;</code> and read from disk on each request, "
        "so edits show up immediately. Map <code>/api/...</code> paths to those files "
        "in the Routing tab.</p></header>",
        '<div class="tabs">'
        '<button class="tab-btn active" data-tab="overview">Overview</button> '
        '<button class="tab-btn" data-tab="routing">API routing</button> '
        '<button class="tab-btn" data-tab="settings">Settings</button></div>',
    ]

    # Overview
    log_lines = "".join(f'<div class="log-line">{escape(line)}</div>' for line in view.log_lines)
    folder_items = "".join(
        f'<li><a href="{_json_url(name)}">{escape(name)}</a> '
        f'<span class="muted">/json/{escape(name)}</span></li>'
        for name in view.folders
    )
    file_items = "".join(f"<li>{_file_link(path)}</li>" for path in view.files)
    parts.append(
        '<div id="overview" class="tab-panel active">'
        '<section class="section"><div class="card"><h2>Request log (live)</h2>'
        f'<div id="log" class="log">{log_lines}</div></div></section>'
        '<section class="section"><div class="card"><h2>Active endpoints</h2>'
        f'<p class="muted">Refresh: <code>{escape(view.refresh_endpoint)}</code></p>'
        f'<p class="muted">Ping: <code>{escape(view.ping_endpoint)}</code></p>'
        f'<div class="tag">API mappings</div><ul>{_mapping_items(view.mappings, False)}</ul>'
        "</div></section>"
        '<section class="grid">'
        f'<div class="card"><div class="tag">Folders</div><ul>{folder_items}</ul></div>'
        f'<div class="card"><div class="tag">Files</div><ul>{file_items}</ul></div>'
        "</section></div>"
    )

    # Routing
    options = "".join(f'<option value="{escape(path)}"></option>' for path in view.files)
    parts.append(
        '<div id="routing" class="tab-panel"><section class="section"><div class="card">'
        "<h2>API routing</h2>"
        '<p class="muted">Map a <code>/api/...</code> endpoint to a file in <code>json/</code>.</p>'
        '<form method="post" action="/config/route-mapping">'
        '<label class="muted">Method</label>'
        '<select name="method"><option>GET</option><option>POST</option></select>'
        '<label class="muted">Path</label>'
        '<input type="text" name="path" placeholder="/api/v1/items/get/all" required>'
        '<label class="muted">File (relative to json/)</label>'
        '<input type="text" name="file" list="file-options" placeholder="items/all.json" required>'
        '<button type="submit">Map</button></form>'
        f'<datalist id="file-options">{options}</datalist>'
        f'<div class="tag">Active mappings</div><ul>{_mapping_items(view.mappings, True)}</ul>'
        "</div></section></div>"
    )

    # Settings
    folder_options = "".join(
        f'<option value="{escape(name)}">{escape(name)}</option>' for name in view.folders
    )
    parts.append(
        '<div id="settings" class="tab-panel"><section class="section">'
        + _endpoint_form("Token refresh endpoint (POST)", "/config/refresh-endpoint", view.refresh_endpoint)
        + _endpoint_form("Ping endpoint (GET)", "/config/ping-endpoint", view.ping_endpoint)
        + '<div class="card"><h2>Folders</h2>'
        '<form method="post" action="/json/create">'
        '<input type="text" name="name" placeholder="new-folder" required>'
        '<button type="submit">Create</button></form>'
        '<form method="post" action="/json/rename">'
        f'<select name="from">{folder_options}</select>'
        '<input type="text" name="to" placeholder="new name" required>'
        '<button type="submit">Rename</button></form>'
        '<form method="post" action="/json/delete">'
        f'<select name="name">{folder_options}</select>'
        '<button type="submit">Delete (also removes its mappings)</button></form></div>'
        '<div class="card"><h2>Request log</h2>'
        '<p class="muted">One path per line. End with <code>/*</code> to ignore a whole prefix. '
        "<code>/</code> and <code>/events</code> are always ignored.</p>"
        '<form method="post" action="/config/log-ignore">'
        f'<textarea name="patterns" rows="5">{escape(chr(10).join(view.log_patterns))}</textarea>'
        '<button type="submit">Save</button></form>'
        '<form method="post" action="/config/log-toggle"><select name="enabled">'
        f'<option value="on"{" selected" if view.log_enabled else ""}>ON</option>'
        f'<option value="off"{"" if view.log_enabled else " selected"}>OFF</option>'
        '</select><button type="submit">Apply</button></form></div>'
        "</section></div>"
    )

    return _page("JSON endpoints", "".join(parts), _SCRIPT % {"history": view.history_size})


def render_folder(folder: str, files: Sequence[str]) -> str:
    items = "".join(f"<li>{_file_link(path)}</li>" for path in files)
    if not files:
        items = '<li class="muted">Empty folder</li>'
    body = (
        f'<header><a href="/json">&larr; back to index</a><h1>{escape(folder)}</h1></header>'
        '<section class="section">'
        f'<div class="card"><div class="tag">Files</div><ul>{items}</ul></div>'
        '<div class="card"><h2>Upload</h2>'
        f'<form method="post" action="{_json_url(folder)}" enctype="multipart/form-data">'
        '<input type="file" name="files" multiple required>'
        '<button type="submit">Upload</button></form></div>'
        "</section>"
    )
    return _page(f"json/{folder}", body)
