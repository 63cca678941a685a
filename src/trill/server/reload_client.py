"""Live-reload browser client.

The script appended to every served HTML page. On load it opens a
WebSocket back to the dev server (same hostname, configured port,
reload path). When the server pushes the reload signal it reloads the
page, asking the browser to bypass its cache.

On close it does nothing, unless a reconnect delay is configured: then
it keeps retrying and reloads once the server is back (the page may
have changed while the server was down).

Rendered once per app with kida.
"""

import json

from kida import Environment

RELOAD_CLIENT_TEMPLATE = """\
<script data-trill="live-reload">
(function(){
  if(window.__trillLiveReload)return;
  window.__trillLiveReload=true;
  var signal={{ signal }};
  var url=(location.protocol==="https:"?"wss://":"ws://")+location.hostname+":{{ port }}{{ path }}";
  function connect(reconnecting){
    var ws=new WebSocket(url);
    ws.onopen=function(){
      if(reconnecting){window.location.reload(true);return;}
      console.log("[trill] Connected to development server.");
    };
    ws.onmessage=function(event){
      if(event.data===signal){
        console.log("[trill] Change detected. Reloading...");
        window.location.reload(true);
      }
    };
    ws.onclose=function(){
      console.log("[trill] Disconnected from development server.");
{% if reconnect_ms %}
      setTimeout(function(){connect(true);},{{ reconnect_ms }});
{% end %}
    };
  }
  connect(false);
})();
</script>
"""


def render_reload_client(
    *,
    port: int,
    path: str = "/",
    signal: str = "file-change-event",
    reconnect_ms: int | None = None,
) -> str:
    """Render the reload-client ``<script>`` block."""
    env = Environment(autoescape=False)
    template = env.from_string(RELOAD_CLIENT_TEMPLATE)
    return template.render(
        {
            "signal": json.dumps(signal),
            "port": int(port),
            "path": path,
            "reconnect_ms": reconnect_ms,
        }
    )
