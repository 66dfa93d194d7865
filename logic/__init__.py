"""logic — Game rules.

Top-level modules
-----------------
cow_factory  — seeded cow generation (sprite, name, rarity, stats)
behavior     — per-cow idle / walk / eat / pet state machine
herd         — runs the state machine for every cow, emits events
play_area    — pasture geometry and cow scale
farm         — shop, upgrades, harvest boost, reminders
achievements — stat-driven unlocks
"""
