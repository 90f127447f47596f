"""Share page (/view/{id}) and expired page (/expired).

Both are static HTML; the share page fetches the bundle from the API, lists
its files, counts down to expiry and moves to /expired when the bundle is
gone. File names are untrusted and only ever assigned via textContent.
"""

import html

# Inline script/style only; overrides the API-wide default-src 'none'.
PAGE_CSP = (
    "default-src 'none'; script-src 'unsafe-inline'; style-src 'unsafe-inline'; "
    "connect-src 'self'; img-src 'self' data:; base-uri 'none'; form-action 'none'"
)

_BASE_CSS = """
        * { box-sizing: border-box; }
        body {
            font-family: system-ui, sans-serif;
            margin: 0;
            min-height: 100vh;
            background: #000;
            color: #e0e0e0;
            padding: 2rem 1rem;
        }
        .wrap { max-width: 560px; margin: 0 auto; }
        h1 { font-size: 1.5rem; font-weight: 600; color: #fff; margin: 0 0 0.5rem 0; }
        .muted { color: #888; font-size: 0.9375rem; }
        .card {
            background: #0c0c0c;
            border: 1px solid #1a1a1a;
            padding: 1.25rem 1.5rem;
            margin-top: 1.25rem;
        }
        ul { list-style: none; padding: 0; margin: 0; }
        li {
            display: flex;
            justify-content: space-between;
            align-items: center;
            padding: 0.75rem 0;
            border-bottom: 1px solid #1a1a1a;
        }
        li:last-child { border-bottom: none; }
        .name { color: #fff; word-break: break-all; }
        a { color: #9ab; }
        #timer { color: #fff; font-weight: 600; }
"""

_VIEW_SCRIPT = """
(function () {
    var parts = window.location.pathname.split('/');
    var bundleId = parts[parts.length - 1];
    var toExpired = function () { window.location.href = '/expired'; };
    if (!bundleId) { toExpired(); return; }

    function formatSize(bytes) {
        if (!bytes) return '0 Bytes';
        var units = ['Bytes', 'KB', 'MB', 'GB', 'TB'];
        var i = Math.min(Math.floor(Math.log(bytes) / Math.log(1024)), units.length - 1);
        return parseFloat((bytes / Math.pow(1024, i)).toFixed(2)) + ' ' + units[i];
    }

    function render(bundle) {
        var files = bundle.files || [];
        var total = files.reduce(function (acc, f) { return acc + f.size; }, 0);
        document.getElementById('title').textContent =
            files.length === 1 ? files[0].originalName : files.length + ' files shared';
        document.getElementById('summary').textContent =
            formatSize(total) + ' \\u00b7 uploaded ' + new Date(bundle.uploadDate).toLocaleString();

        var list = document.getElementById('files');
        files.forEach(function (f) {
            var item = document.createElement('li');
            var name = document.createElement('span');
            name.className = 'name';
            name.textContent = f.originalName + ' (' + formatSize(f.size) + ')';
            var link = document.createElement('a');
            link.href = '/api/download/' + encodeURIComponent(f.id);
            link.textContent = 'Download';
            item.appendChild(name);
            item.appendChild(link);
            list.appendChild(item);
        });

        var expiresAt = new Date(bundle.expiresAt);
        var tick = function () {
            var diff = expiresAt - new Date();
            if (diff <= 0) { toExpired(); return; }
            var h = Math.floor(diff / 3600000);
            var m = Math.floor((diff % 3600000) / 60000);
            var s = Math.floor((diff % 60000) / 1000);
            document.getElementById('timer').textContent = h + 'h ' + m + 'm ' + s + 's';
        };
        tick();
        setInterval(tick, 1000);
    }

    fetch('/api/bundle/' + encodeURIComponent(bundleId))
        .then(function (r) { if (!r.ok) throw new Error('not found'); return r.json(); })
        .then(render)
        .catch(toExpired);
})();
"""


def render_view_page(app_name: str) -> str:
    """Return HTML for the share page of one bundle."""
    title = html.escape(app_name)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>{_BASE_CSS}</style>
</head>
<body>
    <div class="wrap">
        <h1 id="title">Loading&hellip;</h1>
        <p class="muted" id="summary"></p>
        <p class="muted">Expires in <span id="timer">&hellip;</span></p>
        <div class="card"><ul id="files"></ul></div>
    </div>
    <script>{_VIEW_SCRIPT}</script>
</body>
</html>
"""


def render_expired_page(app_name: str) -> str:
    """Return HTML shown once a bundle is gone."""
    title = html.escape(app_name)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} - link expired</title>
    <style>{_BASE_CSS}</style>
</head>
<body>
    <div class="wrap">
        <h1>This link has expired</h1>
        <p class="muted">The files you are looking for were deleted when their time ran out.</p>
        <p><a href="/">Share your own files</a></p>
    </div>
</body>
</html>
"""
