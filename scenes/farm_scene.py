"""
scenes/farm_scene.py — The pasture.

Draws the herd, the HUD and the debug overlay, and turns input into
farm operations.  All game rules live in ``logic/``; this scene only
calls them and shows what happened (floating text from bus events).

Controls:
  Click cow   = select + pet          Click grass = click income
  B           = buy a cow             S           = sell selected
  R           = rename selected (type, Enter / Escape)
  1-5         = buy upgrade           H           = start harvest
  E           = export save           I           = import newest export
  A           = achievements panel
  F1          = debug overlay         F4          = reload tuning
  Delete x2   = wipe the farm         F11         = fullscreen (App)
"""

from __future__ import annotations
import pygame

from components.dev_log import DevLog
from components.game_state import GameState
from core.app import App
from core.events import EventBus
from core.save import SaveManager, newest_export
from core.scene import Scene
from core import tuning
from data.cow_data import (
    GREY_BASE, HORN_LAYER, LAYER_COLOURS, MAX_HEARTS, SPOT_LAYERS, UPGRADE_KEYS,
)
from logic import achievements, farm
from logic.herd import Herd
from logic.play_area import PlayArea

# ── UI constants ─────────────────────────────────────────────────────
_SKY = (150, 200, 240)
_GRASS = (96, 168, 72)
_GRASS_DARK = (80, 146, 60)
_HUD_TEXT = (255, 255, 255)
_MOONEY = (255, 220, 90)
_HEART = (240, 90, 120)
_BOOST = (255, 160, 60)
_SELECT = (255, 255, 120)
_DIM = (200, 200, 200)

_FLOAT_LIFE = 1.2        # seconds a floating label stays up
_MESSAGE_LIFE = 4.0
_PURGE_WINDOW = 3.0      # seconds between the two Delete presses
_REMINDER_CHECK = 60.0   # seconds between export-reminder checks

_UPGRADE_LABELS = {
    "farm_level": "Farm",
    "click_level": "Click",
    "harvest_cooldown_level": "Harvest cooldown",
    "harvest_duration_level": "Harvest duration",
    "harvest_multiplier_level": "Harvest power",
}

_CAT_COLORS: dict[str, tuple[int, int, int]] = {
    "anim": (150, 150, 150),
    "eat": (255, 220, 90),
    "level": (120, 200, 255),
    "pet": (240, 90, 120),
}


def _tint(rgb: tuple[int, int, int], f) -> tuple[int, int, int]:
    """Approximate a layer filter on a flat colour."""
    if f is None:
        return rgb
    c = pygame.Color(*rgb)
    h, s, v, a = c.hsva
    h = (h + f.hue) % 360
    s = min(100.0, max(0.0, s * (1 + f.saturate)))
    v = min(100.0, max(0.0, v * f.brightness * (1 + f.contrast / 2)))
    c.hsva = (h, s, v, a)
    return (c.r, c.g, c.b)


class FarmScene(Scene):
    def __init__(self, state: GameState, saves: SaveManager):
        self.state = state
        self.saves = saves
        self.bus = EventBus()
        self.log = DevLog()
        self.herd: Herd | None = None
        self.selected: str | None = None
        self.show_debug = False
        self.show_achievements = False

        self.renaming = False
        self.rename_text = ""

        self.floaters: list[dict] = []
        self.message = ""
        self.message_timer = 0.0
        self.purge_armed = 0.0
        self.reminder_timer = 0.0

        self.bus.subscribe("CowAte", self._on_ate)
        self.bus.subscribe("CowLevelledUp", self._on_level)
        self.bus.subscribe("CowPetted", self._on_petted)
        self.bus.subscribe("HarvestStarted", self._on_harvest_started)
        self.bus.subscribe("HarvestEnded", self._on_harvest_ended)
        self.bus.subscribe("CowBought", self._on_bought)
        self.bus.subscribe("CowSold", self._on_sold)
        self.bus.subscribe("UpgradeBought", self._on_upgrade)
        self.bus.subscribe("AchievementUnlocked", self._on_achievement)

    # ── lifecycle ────────────────────────────────────────────────────

    def on_enter(self, app: App):
        if self.herd is None:
            self.herd = Herd(PlayArea(*app.size), self.bus, self.log)
        self.herd.sync(self.state.cows)

    def on_exit(self, app: App):
        self.saves.suspend(self.state)

    def on_suspend(self, app: App):
        self.saves.suspend(self.state)

    def on_resize(self, width: int, height: int, app: App):
        if self.herd:
            self.herd.resize(width, height)

    # ── bus handlers ─────────────────────────────────────────────────

    def _float(self, cow_id: str, text: str, color) -> None:
        b = self.herd.behavior(cow_id) if self.herd else None
        if b is None:
            return
        self.floaters.append({"text": text, "x": b.x, "y": b.y - 30,
                              "age": 0.0, "color": color})

    def _on_ate(self, ev):
        self._float(ev.cow_id, f"+{ev.mooney}", _BOOST if ev.boosted else _MOONEY)

    def _on_level(self, ev):
        self._float(ev.cow_id, f"Level {ev.level}!", (120, 200, 255))

    def _on_petted(self, ev):
        if ev.gained:
            self._float(ev.cow_id, "+1 heart", _HEART)
        else:
            self._float(ev.cow_id, "already petted today", _DIM)

    def _on_harvest_started(self, ev):
        self._say(f"Harvest! x{ev.multiplier:g} for {ev.duration_ms // 1000}s")

    def _on_harvest_ended(self, ev):
        self._say("Harvest over")

    def _on_bought(self, ev):
        cow = self.state.cow(ev.cow_id)
        if cow:
            self._say(f"Welcome, {cow.name} ({cow.stats.rarity})!")

    def _on_sold(self, ev):
        self._say(f"Sold for {ev.price} mooney")

    def _on_upgrade(self, ev):
        self._say(f"{_UPGRADE_LABELS[ev.key]} → {ev.level}")

    def _on_achievement(self, ev):
        self._say(f"Achievement unlocked: {ev.label}")

    def _say(self, text: str) -> None:
        self.message = text
        self.message_timer = _MESSAGE_LIFE

    # ── input ────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        if self.renaming:
            self._rename_input(event)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._click(*event.pos)
            return
        if event.type != pygame.KEYDOWN:
            return

        key = event.key
        if key == pygame.K_ESCAPE:
            if self.selected:
                self.selected = None
            else:
                app.quit()
        elif key == pygame.K_F1:
            self.show_debug = not self.show_debug
        elif key == pygame.K_a:
            self.show_achievements = not self.show_achievements
        elif key == pygame.K_F4:
            tuning.reload()
            self._say("Tuning reloaded")
        elif key == pygame.K_b:
            self._buy()
        elif key == pygame.K_s:
            self._sell()
        elif key == pygame.K_r and self.selected:
            cow = self.state.cow(self.selected)
            if cow:
                self.renaming = True
                self.rename_text = cow.name
        elif pygame.K_1 <= key <= pygame.K_5:
            self._upgrade(UPGRADE_KEYS[key - pygame.K_1])
        elif key == pygame.K_h:
            if not farm.start_harvest(self.state, farm.now_ms(), self.bus):
                wait = farm.harvest_ready_in_ms(self.state, farm.now_ms()) // 1000
                self._say(f"Harvest ready in {wait}s")
        elif key == pygame.K_e:
            self._export()
        elif key == pygame.K_i:
            self._import()
        elif key == pygame.K_DELETE:
            self._purge()

    def _rename_input(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            self.renaming = False
        elif event.key == pygame.K_RETURN:
            if self.selected and farm.rename_cow(self.state, self.selected, self.rename_text):
                self._say(f"Renamed to {self.rename_text.strip()}")
            else:
                self._say("That name won't do")
            self.renaming = False
        elif event.key == pygame.K_BACKSPACE:
            self.rename_text = self.rename_text[:-1]
        elif event.unicode and event.unicode.isprintable():
            self.rename_text += event.unicode

    def _click(self, x: int, y: int) -> None:
        cow_id = self.herd.hit_test(x, y)
        if cow_id is None:
            gained = farm.click(self.state)
            self.floaters.append({"text": f"+{gained}", "x": x, "y": y,
                                  "age": 0.0, "color": _MOONEY})
            return
        self.selected = cow_id
        self.herd.pet(self.state, cow_id)

    def _buy(self) -> None:
        price = farm.cow_price(self.state)
        if price is None:
            self._say("The farm is full")
            return
        cow = farm.buy_cow(self.state, self.bus)
        if cow is None:
            self._say(f"Need {price} mooney")
            return
        self.herd.sync(self.state.cows)
        self.selected = cow.id

    def _sell(self) -> None:
        if not self.selected:
            self._say("Select a cow first")
            return
        price = farm.sell_cow(self.state, self.selected, self.bus)
        if price is None:
            return
        self.herd.sync(self.state.cows)
        self.selected = None

    def _upgrade(self, key: str) -> None:
        price = farm.upgrade_price(self.state, key)
        if price is None:
            self._say(f"{_UPGRADE_LABELS[key]} is maxed")
        elif not farm.purchase_upgrade(self.state, key, self.bus):
            self._say(f"Need {price} mooney")

    def _export(self) -> None:
        try:
            path = self.saves.export(self.state)
        except OSError as ex:
            print(f"[SAVE] export failed: {ex}")
            self._say("Export failed")
            return
        self._say(f"Exported {path.name}")

    def _import(self) -> None:
        path = newest_export(tuning.get("persistence", "export_dir", "exports"))
        if path is None:
            self._say("No export found")
            return
        result = self.saves.import_file(self.state, path)
        if not result.ok:
            self._say("Import failed")
            return
        self.selected = None
        self.herd.sync(self.state.cows)
        self._say(f"Imported {result.cows} cow(s)")

    def _purge(self) -> None:
        if self.purge_armed <= 0.0:
            self.purge_armed = _PURGE_WINDOW
            self._say("Press Delete again to wipe the farm")
            return
        self.purge_armed = 0.0
        self.saves.purge(self.state)
        self.state.replace_with(farm.new_game())
        self.saves.save(self.state)
        self.selected = None
        self.herd.sync(self.state.cows)
        self._say("Fresh start")

    # ── update ───────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        self.herd.tick(self.state, dt, farm.now_ms())
        achievements.check(self.state, self.bus)
        self.bus.drain()
        self.saves.update(dt, self.state)

        if self.purge_armed > 0.0:
            self.purge_armed = max(0.0, self.purge_armed - dt)
        if self.message_timer > 0.0:
            self.message_timer -= dt

        self.reminder_timer -= dt
        if self.reminder_timer <= 0.0:
            self.reminder_timer = _REMINDER_CHECK
            if farm.export_reminder_due(self.state, farm.now_ms()):
                self._say("It's been a while: press E to export a backup")

        for f in self.floaters:
            f["age"] += dt
            f["y"] -= 30 * dt
        self.floaters = [f for f in self.floaters if f["age"] < _FLOAT_LIFE]

    # ── draw ─────────────────────────────────────────────────────────

    def draw(self, surface: pygame.Surface, app: App):
        w, h = surface.get_size()
        land_y = int(h * (1 - float(tuning.get("area", "land_ratio", 0.6))))
        surface.fill(_SKY)
        pygame.draw.rect(surface, _GRASS, (0, land_y, w, h - land_y))
        pygame.draw.line(surface, _GRASS_DARK, (0, land_y), (w, land_y), 3)

        views = sorted(self.herd.views(), key=lambda v: v.y)
        for view in views:
            cow = self.state.cow(view.id)
            if cow is not None:
                self._draw_cow(surface, app, cow, view)

        for f in self.floaters:
            app.draw_text(surface, f["text"], int(f["x"]), int(f["y"]),
                          f["color"], font=app.font_lg)

        self._draw_hud(surface, app)
        if self.show_achievements:
            self._draw_achievements(surface, app)
        if self.show_debug:
            self._draw_debug(surface, app)

    def _draw_cow(self, surface, app: App, cow, view) -> None:
        size = float(tuning.get("area", "frame_size", 64)) * view.scale
        body = pygame.Rect(0, 0, int(size * 0.8), int(size * 0.5))
        body.center = (int(view.x), int(view.y))
        filters = cow.sprite.filters

        base = next((l for l in cow.sprite.layers if l.startswith("base")), GREY_BASE)
        pygame.draw.ellipse(surface, _tint(LAYER_COLOURS.get(base, (150, 150, 150)),
                                           filters.get(base)), body)

        head = pygame.Rect(0, 0, int(size * 0.32), int(size * 0.3))
        head.center = (body.centerx + view.facing * body.width // 2,
                       body.top + head.height // 3)
        if view.anim == "eat":
            head.centery = body.bottom - head.height // 3
        pygame.draw.ellipse(surface, _tint(LAYER_COLOURS.get(base, (150, 150, 150)),
                                           filters.get(base)), head)

        for layer in SPOT_LAYERS:
            if layer in cow.sprite.layers:
                colour = _tint(LAYER_COLOURS[layer], filters.get(layer))
                r = max(2, int(size * 0.07))
                for ox, oy in ((-0.2, -0.05), (0.1, 0.08), (0.22, -0.1)):
                    pygame.draw.circle(surface, colour,
                                       (int(body.centerx + ox * size * view.facing),
                                        int(body.centery + oy * size)), r)

        if HORN_LAYER in cow.sprite.layers:
            pygame.draw.line(surface, LAYER_COLOURS[HORN_LAYER],
                             (head.left + 3, head.top + 2), (head.left, head.top - 5), 3)
            pygame.draw.line(surface, LAYER_COLOURS[HORN_LAYER],
                             (head.right - 3, head.top + 2), (head.right, head.top - 5), 3)

        if view.anim in ("eat", "pet"):
            pygame.draw.circle(surface, LAYER_COLOURS["tongue"],
                               (head.centerx + view.facing * head.width // 3,
                                head.bottom - 2), 3)

        # legs bob while walking
        step = 3 if view.anim == "walk" and (pygame.time.get_ticks() // 150) % 2 else 0
        leg_colour = (60, 50, 40)
        for i, lx in enumerate((0.25, 0.75)):
            x = body.left + int(body.width * lx)
            dy = step if i == 0 else -step
            pygame.draw.line(surface, leg_colour, (x, body.bottom - 4),
                             (x, body.bottom + 8 + dy), 3)

        if cow.id == self.selected:
            pygame.draw.ellipse(surface, _SELECT, body.inflate(8, 8), 2)
            label = self.rename_text + "_" if self.renaming else cow.name
            app.draw_text_bg(surface, label, body.left, body.top - 34, _SELECT,
                             font=app.font_sm)
            hearts = "♥" * cow.hearts + "·" * (MAX_HEARTS - cow.hearts)
            app.draw_text_bg(surface, f"Lv{cow.level} {hearts}", body.left,
                             body.top - 20, _HEART, font=app.font_sm)

    def _draw_hud(self, surface, app: App) -> None:
        s = self.state
        y = 8
        app.draw_text_bg(surface, f"Mooney: {s.mooney}", 8, y, _MOONEY, font=app.font_lg)
        y += 26
        price = farm.cow_price(s)
        buy = "full" if price is None else f"{price}"
        app.draw_text_bg(surface, f"Cows {len(s.cows)}/{farm.farm_capacity(s)}  "
                                  f"[B]uy {buy}", 8, y, _HUD_TEXT)
        y += 20
        for i, key in enumerate(UPGRADE_KEYS, start=1):
            up = farm.upgrade_price(s, key)
            cost = "max" if up is None else str(up)
            app.draw_text_bg(surface, f"[{i}] {_UPGRADE_LABELS[key]} "
                                      f"Lv{s.upgrades.get(key, 1)} ({cost})",
                             8, y, _DIM, font=app.font_sm)
            y += 16

        now = farm.now_ms()
        if s.is_harvest:
            left = max(0, (s.last_harvest or 0) + farm.harvest_duration_ms(s) - now)
            text, colour = f"HARVEST x{farm.harvest_multiplier(s):g} {left // 1000}s", _BOOST
        else:
            wait = farm.harvest_ready_in_ms(s, now) // 1000
            text = "[H]arvest ready" if wait == 0 else f"Harvest in {wait}s"
            colour = _HUD_TEXT
        app.draw_text_bg(surface, text, 8, y + 4, colour)

        if self.selected:
            cow = s.cow(self.selected)
            if cow:
                need = cow.xp_to_level
                xp = "max" if need is None else f"{cow.xp}/{need}"
                app.draw_text_bg(surface,
                                 f"{cow.name} [{cow.stats.rarity}] xp {xp} "
                                 f"sell {cow.sell_value()}  [S]ell [R]ename",
                                 8, surface.get_height() - 24, _HUD_TEXT)

        if self.message_timer > 0.0 and self.message:
            x = surface.get_width() // 2 - app.font_lg.size(self.message)[0] // 2
            app.draw_text_bg(surface, self.message, x, 12, _HUD_TEXT, font=app.font_lg)

    def _draw_achievements(self, surface, app: App) -> None:
        rows = achievements.summary(self.state)
        w, h = surface.get_size()
        pw, ph = 340, 36 + 18 * len(rows)
        px, py = (w - pw) // 2, max(8, (h - ph) // 2)
        panel = pygame.Surface((pw, ph), pygame.SRCALPHA)
        panel.fill((40, 32, 24, 220))
        surface.blit(panel, (px, py))
        done = sum(1 for r in rows if r[3])
        app.draw_text(surface, f"Achievements {done}/{len(rows)}  [A] close",
                      px + 10, py + 8, _MOONEY)
        y = py + 30
        for label, current, target, unlocked in rows:
            mark = "[x]" if unlocked else "[ ]"
            colour = _HUD_TEXT if unlocked else _DIM
            app.draw_text(surface, f"{mark} {label:<16} {current:,}/{target:,}",
                          px + 10, y, colour, font=app.font_sm)
            y += 18

    def _draw_debug(self, surface, app: App) -> None:
        w, h = surface.get_size()
        panel = pygame.Surface((360, h), pygame.SRCALPHA)
        panel.fill((16, 20, 24, 210))
        surface.blit(panel, (w - 360, 0))
        x = w - 352
        y = 8
        app.draw_text(surface, f"FPS {app.clock.get_fps():.0f}  saves {self.saves.saves}",
                      x, y, (0, 255, 200), font=app.font_sm)
        y += 16
        app.draw_text(surface, f"events {self.bus.stats}", x, y, _DIM, font=app.font_sm)
        y += 20
        for b in self.herd.behaviors.values():
            app.draw_text(surface, f"{b.cow_id[:6]} {b.mode.value:<4} {b.anim:<10} "
                                   f"cd{b.eat_cooldown:<4}", x, y, _DIM, font=app.font_sm)
            y += 14
        y += 8
        rows = (h - y) // 14
        feed = self.log.for_cow(self.selected, rows) if self.selected else self.log.recent(rows)
        for entry in feed:
            colour = _CAT_COLORS.get(entry["cat"], _DIM)
            app.draw_text(surface, f"{entry['t']:7.1f} {entry['name'][:10]:<10} "
                                   f"{entry['msg']}", x, y, colour, font=app.font_sm)
            y += 14
