"""FastAPI application, chat page and startup."""

import sys

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse

from spotify_assistant.adapters.web.chat_routes import chat_router
from spotify_assistant.adapters.web.deps import get_llm
from spotify_assistant.adapters.web.player_routes import player_router
from spotify_assistant.config import AI_PROVIDER, CONFIG, DEFAULT_MODEL, MODEL_ALIASES, __version__
from spotify_assistant.ports.outbound import LLMPort

app = FastAPI(title="Spotify Chat Assistant", version=__version__)
app.include_router(chat_router)
app.include_router(player_router)


@app.get("/status")
async def status(llm: LLMPort = Depends(get_llm)):
    """Server status endpoint"""
    tracker = getattr(llm, "usage_tracker", None)
    return {
        "version": __version__,
        "provider": AI_PROVIDER,
        "model": MODEL_ALIASES[DEFAULT_MODEL],
        "spotifyFallbackToken": bool(CONFIG["spotify_access_token"]),
        "usage": tracker.get_status() if tracker else None,
    }


@app.get("/", response_class=HTMLResponse)
async def root():
    """Chat page"""
    return f"""
    <html>
      <head>
        <title>Spotify Chat Assistant</title>
        <style>
          body {{ font-family: sans-serif; max-width: 720px; margin: 40px auto; }}
          #log {{ border: 1px solid #ddd; border-radius: 6px; padding: 12px; min-height: 300px; }}
          .user {{ text-align: right; color: #1db954; margin: 8px 0; }}
          .assistant {{ margin: 8px 0; white-space: pre-wrap; }}
          .action {{ font-size: 12px; color: #555; margin-left: 12px; }}
          .error {{ color: #c62828; }}
          input {{ padding: 8px; font-size: 15px; }}
          #message {{ width: 80%; }}
          #token {{ width: 100%; margin-bottom: 10px; }}
        </style>
      </head>
      <body>
        <h1>Spotify Chat Assistant</h1>
        <p><small>Model: {AI_PROVIDER} / {MODEL_ALIASES[DEFAULT_MODEL]}</small></p>
        <input id="token" type="password" placeholder="Spotify access token (optional if set on server)">
        <div id="log"></div>
        <form id="form">
          <input id="message" placeholder="Ask me to play something...">
          <button type="submit">Send</button>
        </form>

        <script>
          const log = document.getElementById('log');
          const tokenInput = document.getElementById('token');
          tokenInput.value = sessionStorage.getItem('spotifyToken') || '';
          let sessionId = null;

          function line(cls, text) {{
            const div = document.createElement('div');
            div.className = cls;
            div.textContent = text;
            log.appendChild(div);
          }}

          function headers() {{
            const h = {{ 'Content-Type': 'application/json' }};
            const token = tokenInput.value.trim();
            sessionStorage.setItem('spotifyToken', token);
            if (token) h['Authorization'] = 'Bearer ' + token;
            return h;
          }}

          async function ensureSession() {{
            if (sessionId) return sessionId;
            const res = await fetch('/sessions', {{ method: 'POST', headers: headers(), body: '{{}}' }});
            sessionId = (await res.json()).id;
            return sessionId;
          }}

          document.getElementById('form').addEventListener('submit', async (e) => {{
            e.preventDefault();
            const input = document.getElementById('message');
            const message = input.value.trim();
            if (!message) return;
            input.value = '';
            line('user', message);
            const res = await fetch('/chat', {{
              method: 'POST',
              headers: headers(),
              body: JSON.stringify({{ message, session_id: await ensureSession() }}),
            }});
            const data = await res.json();
            if (!res.ok) {{
              line('assistant error', data.error || data.detail || 'Request failed');
              return;
            }}
            line('assistant', data.response);
            for (const call of data.functionCalls || []) {{
              if (call.result) {{
                line('action', '✓ Successfully executed ' + call.name);
              }} else {{
                line('action error', '❌ Failed to execute ' + call.name + (call.error ? ': ' + call.error : ''));
              }}
              if (call.reauthRequired) line('action error', 'Please sign in to Spotify again.');
            }}
          }});
        </script>
      </body>
    </html>
    """


@app.on_event("startup")
async def startup_event():
    print("Spotify chat assistant starting", file=sys.stderr)
    print(f"LLM provider: {AI_PROVIDER} ({MODEL_ALIASES[DEFAULT_MODEL]})", file=sys.stderr)
    if not CONFIG["spotify_access_token"]:
        print("No SPOTIFY_ACCESS_TOKEN set; requests must carry a bearer token", file=sys.stderr)
    print("Ready!", file=sys.stderr)


def main():
    uvicorn.run(app, host="0.0.0.0", port=CONFIG["port"])


if __name__ == "__main__":
    main()
