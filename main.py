"""
main.py — Bootstrap

1. Load tuning
2. Open the save backends and restore the farm (or start a new one)
3. Create the app and push the pasture
4. Run, then flush pending save writes
"""

from core import tuning
from core.app import App
from core.save import default_manager
from components.game_state import GameState
from logic.farm import new_game
from scenes.farm_scene import FarmScene


def main():
    tuning.load()

    saves = default_manager()
    state = GameState()
    if not saves.load(state):
        state.replace_with(new_game())
        saves.save(state)
    print(f"[MAIN] {len(state.cows)} cow(s), {state.mooney} mooney")

    app = App(title="Mooney Farm", width=960, height=640)
    app.push_scene(FarmScene(state, saves))
    try:
        app.run()
    finally:
        saves.close()


if __name__ == "__main__":
    main()
