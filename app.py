import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import folium
from flask import Flask, render_template, request, jsonify
from markupsafe import escape

import config

from services import (
    Dashboard,
    LocationError,
    summarize_devices
)

# Настройка логирования
logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger("app")

app = Flask(__name__)
app.config.from_object(config)

dashboard = Dashboard()


# ================= ROUTES =================

@app.route("/")
def index():
    # Первый запрос после старта без фонового опроса
    if not dashboard.state.devices:
        dashboard.refresh_devices()
        if dashboard.state.current_device:
            dashboard.refresh()

    snap = dashboard.snapshot()
    return render_template(
        "dashboard.html",
        state=snap,
        locations=dashboard.locations.all(),
        refresh_interval=config.REFRESH_INTERVAL,
        colors=config.COLORS
    )


@app.get("/healthz")
def healthz():
    return {"ok": True}


# ================= API ROUTES =================

@app.get("/api/state")
def api_state():
    return jsonify(dashboard.snapshot())


@app.get("/api/chart")
def api_chart():
    mode = request.args.get("mode")
    hours = request.args.get("hours")
    if mode or hours:
        try:
            dashboard.set_chart_range(mode or dashboard.state.chart_mode,
                                      int(hours or dashboard.state.chart_hours))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
    chart = dashboard.state.chart
    if chart is None:
        return jsonify({"labels": [], "levels": [], "rates": [], "type": "line"})
    return jsonify(chart)


@app.post("/api/chart-range")
def api_chart_range():
    body = request.get_json(silent=True) or {}
    try:
        mode = body.get("mode", config.DEFAULT_TIME_RANGE)
        dashboard.set_chart_range(mode, int(body.get("hours", 1)))
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(dashboard.state.chart or {})


@app.post("/api/device")
def api_device():
    body = request.get_json(silent=True) or {}
    device_id = body.get("deviceID")
    try:
        dashboard.select_device(device_id)
    except KeyError:
        return jsonify({"error": f"unknown device {device_id}"}), 404
    return jsonify(dashboard.snapshot())


@app.post("/api/refresh")
def api_refresh():
    dashboard.refresh_devices()
    dashboard.refresh()
    return jsonify(dashboard.snapshot())


@app.post("/api/auto-refresh")
def api_auto_refresh():
    s = dashboard.toggle_auto_refresh()
    return jsonify({"auto_refresh": s.auto_refresh})


@app.get("/api/devices")
def api_devices():
    return jsonify({
        "devices": dashboard.device_options(),
        "summary": summarize_devices(dashboard.state.devices)
    })


@app.route("/api/locations", methods=["GET", "POST"])
def api_locations():
    if request.method == "GET":
        return jsonify(dashboard.locations.all())

    body = request.get_json(silent=True) or request.form
    try:
        entry = dashboard.save_location(
            body.get("deviceID"), body.get("name"), body.get("lat"), body.get("lng")
        )
    except LocationError as e:
        return jsonify({"error": str(e)}), 400
    except OSError:
        logger.exception("Error saving locations")
        return jsonify({"error": "could not persist location"}), 500
    return jsonify({"deviceID": body.get("deviceID"), **entry})


@app.route("/map/<device_id>")
def device_map(device_id):
    ctx = dashboard.map_context(device_id)
    if not ctx:
        return f"<h3>No saved location for {escape(device_id)}</h3>", 404

    loc = ctx["location"]
    m = folium.Map(location=(loc["lat"], loc["lng"]), zoom_start=config.MAP_DEFAULT_ZOOM,
                   tiles=config.MAP_TILES)
    popup_html = generate_popup_html(device_id, loc, ctx["reading"])
    folium.Marker(
        location=(loc["lat"], loc["lng"]),
        popup=folium.Popup(popup_html, max_width=300, min_width=220, show=True),
        tooltip=escape(loc.get("name") or device_id)
    ).add_to(m)

    return m.get_root().render()


# ================= HELPERS =================

def format_measurement_time(seconds):
    if seconds is None:
        return "—"
    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.warning("Unusable measurement timestamp: %r", seconds)
        return "—"
    return dt.astimezone(ZoneInfo(config.DISPLAY_TIMEZONE)).strftime("%m/%d/%Y, %I:%M:%S %p")


def generate_popup_html(device_id, location, reading):
    """HTML всплывающего окна маркера: имя точки и последнее показание."""
    name = escape(location.get("name") or "Water Monitoring Station")
    device_id = escape(device_id)
    html = [
        '<div style="min-width: 220px;">',
        f'<h3 style="margin: 0 0 10px 0; color: #1f2937; font-size: 1.1em;"><b>{device_id}</b></h3>',
        f'<p style="margin: 5px 0; color: #6b7280; font-size: 0.9em;">{name}</p>'
    ]

    if reading:
        html.append(f"""
            <hr style="margin: 10px 0; border: none; border-top: 1px solid #e5e7eb;">
            <div style="margin-bottom: 10px; padding: 5px; background: #f3f4f6; border-radius: 4px;">
                <div style="font-size: 0.75em; color: #6b7280;">📅 Last Measurement</div>
                <div style="font-size: 0.85em; color: #374151; font-weight: 600;">{format_measurement_time(reading['received_at'])}</div>
            </div>
            <div style="display: grid; gap: 8px;">
                <div>💧 Water Level: <strong style="color: {config.COLORS['water_level']};">{reading['water_level']:.1f} cm</strong></div>
                <div>📈 Rate: <strong style="color: {config.COLORS['rate']};">{reading['rate_display']} cm/hr</strong></div>
                <div>🔋 Battery: <strong style="color: {config.COLORS['battery']};">{reading['battery']}%</strong></div>
            </div>
        """)

    html.append('</div>')
    return "".join(html)


if __name__ == "__main__":
    dashboard.startup()
    try:
        app.run(host="0.0.0.0", debug=False, port=config.PORT)
    finally:
        dashboard.shutdown()
