APP_QSS = """
/*
Operator console dark theme
- Hard edges (minimal rounding)
- Monochrome ramp, colour reserved for state (connection, severity)
*/

/* ---- Palette (documentation) ----
BG:          #0C0F12
PANEL:       #10151A
WELL:        #0A0D10
BORDER:      #27313A
BORDER_STR:  #36424D
TEXT:        #D6DADF
TEXT_MUTED:  #9AA6B2
ACCENT:      #7AA2FF
INFO:        #2196F3
WARN:        #FF9800
CRITICAL:    #F44336
*/

QMainWindow, QWidget {
	background: #0C0F12;
	color: #D6DADF;
	font-family: sans-serif;
	font-size: 13px;
}

#TopBar {
	background: #10151A;
	border-bottom: 2px solid #27313A;
}

QPushButton {
	background: #10151A;
	border: 2px solid #27313A;
	border-radius: 0px;
	padding: 8px 12px;
	font-weight: 600;
	letter-spacing: 0.4px;
}

QPushButton:hover {
	border: 2px solid #36424D;
}

QPushButton:pressed {
	background: #0A0D10;
}

QPushButton:focus {
	border: 2px solid #7AA2FF;
}

/* Connection badge */
QLabel#ChipNeutral, QLabel#ChipGood, QLabel#ChipCaution {
	padding: 6px 10px;
	border-radius: 0px;
	border: 2px solid #27313A;
	font-weight: 800;
	letter-spacing: 0.9px;
	text-transform: uppercase;
}

QLabel#ChipNeutral { color: #D6DADF; background: rgba(255,255,255,0.03); }
QLabel#ChipGood    { color: #2fe37a; background: rgba(47,227,122,0.10); border: 2px solid rgba(47,227,122,0.35); }
QLabel#ChipCaution { color: #ffcc66; background: rgba(255,204,102,0.12); border: 2px solid rgba(255,204,102,0.35); }

/* Log toasts */
QFrame#Toast {
	background: rgba(16,21,26,0.92);
	border: 2px solid #27313A;
	border-left: 4px solid #2196F3;
}

QFrame#Toast[severity="WARN"]     { border-left: 4px solid #FF9800; }
QFrame#Toast[severity="CRITICAL"] { border-left: 4px solid #F44336; }

QLabel#ToastLevel {
	font-weight: 800;
	letter-spacing: 0.9px;
	background: transparent;
}

QLabel#ToastTime {
	color: #9AA6B2;
	background: transparent;
}

QLabel#ToastMessage {
	background: transparent;
}

QToolButton#ToastDismiss {
	background: transparent;
	border: none;
	color: #9AA6B2;
	font-weight: 800;
}
"""
