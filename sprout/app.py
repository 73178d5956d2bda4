"""Sprout menu-bar host: wires the timer engine to the desktop."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, Qt
from PyQt6.QtGui import QColor, QGuiApplication, QIcon, QImage, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .completion import CompletionHandler
from .database.store import DatabaseStore, KeyValueStore
from .settings import Settings, load_settings
from .timer.clock import Clock, SystemClock
from .timer.engine import TimerEngine
from .timer.state import Session, TimerMode, format_clock


logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(session: Session) -> QIcon:
    """Generate a 32×32 monochrome template icon for the menu bar.

    - idle:          thin circle outline
    - focus running: filled circle
    - break running: thin circle with small dot in centre
    - paused:        two vertical pause bars
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(colour)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if session.is_paused:
        bar_w, bar_h = 8, 28
        gap = 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    elif session.mode == TimerMode.FOCUS:
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if session.mode == TimerMode.BREAK:
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(colour)
            dot_r = 6
            p.drawEllipse(cx - dot_r, cy - dot_r, dot_r * 2, dot_r * 2)

    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


_MODE_LABELS = {
    TimerMode.FOCUS: "Focus",
    TimerMode.BREAK: "Break",
    TimerMode.IDLE: "Ready",
}


class SproutTray(QObject):
    """System-tray front end.

    Builds the engine with a database store and the system clock unless
    given others, and re-runs recovery whenever the application becomes
    active again (window focus, wake from sleep).
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store: KeyValueStore | None = None,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or load_settings()

        self._engine = TimerEngine(
            store if store is not None else DatabaseStore(),
            clock if clock is not None else SystemClock(self),
            parent=self,
        )

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._build_tray_menu()

        # ── completion: sprout + sound + notification ─────────────────
        self._completion = CompletionHandler(
            self._engine,
            alert=QApplication.beep,
            notify=self._send_notification,
            settings=self._settings,
        )

        # ── wire signals ──────────────────────────────────────────────
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.tick.connect(self._on_tick)
        self._engine.sprouts_changed.connect(self._on_sprouts_changed)

        app = QGuiApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_application_state_changed)

        # Anything that elapsed while we were closed completes now, before
        # the icon is first drawn from the session.
        self._engine.recover()

        self._on_state_changed(self._engine.session)
        self._on_sprouts_changed(self._engine.sprouts)
        self._tray_icon.show()

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu()

        self._start_action = menu.addAction("Start Focus")
        self._start_action.triggered.connect(self._toggle_start)

        self._break_action = menu.addAction("Start Break")
        self._break_action.triggered.connect(self._engine.start_break)

        self._reset_action = menu.addAction("Reset")
        self._reset_action.triggered.connect(self._engine.reset)

        menu.addSeparator()

        self._garden_action = menu.addAction("")
        self._garden_action.setEnabled(False)

        menu.addSeparator()

        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._menu = menu
        self._tray_icon.setContextMenu(menu)

    def _toggle_start(self) -> None:
        """Start, pause, or resume based on current state."""
        if self._engine.is_running:
            self._engine.pause()
        else:
            self._engine.start()

    def _quit_app(self) -> None:
        self._engine.shutdown()
        self._tray_icon.hide()
        QApplication.instance().quit()

    def _send_notification(self, title: str, body: str) -> None:
        self._tray_icon.showMessage(title, body)

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, session: Session) -> None:
        self._tray_icon.setIcon(_make_tray_icon(session))

        if session.is_running:
            self._start_action.setText("Pause")
        elif session.is_paused:
            self._start_action.setText("Resume")
        else:
            self._start_action.setText("Start Focus")
        self._break_action.setEnabled(session.is_idle)
        self._reset_action.setEnabled(not session.is_idle)

        self._update_tooltip(session.time_remaining)

    def _on_tick(self, remaining: int) -> None:
        self._update_tooltip(remaining)

    def _on_sprouts_changed(self, count: int) -> None:
        self._garden_action.setText(f"Your Garden: {count} Sprouts")

    def _update_tooltip(self, remaining: int) -> None:
        session = self._engine.session
        label = _MODE_LABELS[session.mode]
        if session.is_idle:
            self._tray_icon.setToolTip(f"Sprout — {label}")
        elif session.is_paused:
            self._tray_icon.setToolTip(f"Sprout — {label} paused {format_clock(remaining)}")
        else:
            self._tray_icon.setToolTip(f"Sprout — {label} {format_clock(remaining)}")

    def _on_application_state_changed(self, state: Qt.ApplicationState) -> None:
        if state == Qt.ApplicationState.ApplicationActive:
            logger.debug("Application active again; recovering timer")
            self._engine.recover()
