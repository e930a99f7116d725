"""Textual stylesheet for the name search and purchase screens."""

ACCENT = "#f59e0b"
SURFACE = "#111827"
PANEL = "#1f2937"
MUTED = "#9ca3af"

CSS = f"""
Screen {{
    background: {SURFACE};
}}

Header, Footer {{
    background: {PANEL};
}}

#connection-status {{
    dock: top;
    height: 1;
    padding: 0 2;
    color: {MUTED};
    text-align: right;
}}

#content {{
    padding: 1 4;
    height: auto;
}}

#content > Label {{
    text-style: bold;
    color: {ACCENT};
    margin-bottom: 1;
}}

#name-input {{
    border: tall {ACCENT};
    margin-bottom: 1;
}}

#name-status {{
    height: 2;
    padding: 0 1;
}}

#name-status.status-checking {{
    text-style: italic;
}}

#name-status.status-available {{
    border-left: thick #10b981;
}}

#name-status.status-registered_listed {{
    border-left: thick {ACCENT};
}}

#name-status.status-registered_unlisted,
#name-status.status-failed {{
    border-left: thick #ef4444;
}}

.preference-row, .buy-row, .wallet-row {{
    height: auto;
    margin-top: 1;
}}

.preference-row Button, .buy-row Button, .wallet-row Button {{
    margin-right: 1;
    min-width: 18;
}}

.wallet-row Button {{
    background: {PANEL};
}}

#session-info {{
    color: {MUTED};
    margin-top: 1;
}}

ModalScreen {{
    align: center middle;
    background: {SURFACE} 70%;
}}

ModalScreen > Vertical {{
    width: 70;
    max-width: 90%;
    height: auto;
    padding: 1 2;
    border: round {ACCENT};
    background: {PANEL};
}}

ModalScreen Horizontal {{
    height: auto;
    margin-top: 1;
}}

#result-title {{
    color: #10b981;
    text-style: bold;
}}

#error-title {{
    color: #ef4444;
    text-style: bold;
}}

#txid-display, #checkout-url {{
    background: {SURFACE};
    color: {ACCENT};
    padding: 0 1;
    margin: 1 0;
}}

#qr-display {{
    height: auto;
}}

#loading-message {{
    color: {ACCENT};
    text-align: center;
    width: 100%;
}}
"""
