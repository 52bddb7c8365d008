"""Built-in concept library.

Each concept maps a family of phrases ("board wipe", "wrath", "sweeper") to one or more query
templates. The first template is the one applied; later templates are alternatives kept for the
database seed. Negative templates are appended after the template when they fit.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Concept:
    """A curated named search pattern."""

    concept_id: str
    aliases: tuple[str, ...]
    templates: tuple[str, ...]
    description: str
    category: str
    priority: int
    negative_templates: tuple[str, ...] = field(default_factory=tuple)


_PRODUCES_ANY = "(produces:w or produces:u or produces:b or produces:r or produces:g or produces:c)"
_PRODUCES_COLOR = "(produces:w or produces:u or produces:b or produces:r or produces:g)"

CONCEPTS: tuple[Concept, ...] = (
    # Ramp and mana.
    Concept(
        "ramp",
        ("ramp", "mana acceleration", "accelerate mana", "mana ramp"),
        ("otag:ramp",),
        "Cards that accelerate mana production",
        "ramp",
        90,
    ),
    Concept(
        "mana_rock",
        ("mana rock", "rocks", "manarock", "artifact ramp"),
        ("otag:mana-rock", f"t:artifact {_PRODUCES_ANY} -t:creature"),
        "Artifacts that produce mana",
        "ramp",
        85,
        ("-t:land",),
    ),
    Concept(
        "mana_dork",
        ("mana dork", "dorks", "mana creature", "creature that taps for mana"),
        ("otag:mana-dork", f"t:creature {_PRODUCES_COLOR}"),
        "Creatures that produce mana",
        "ramp",
        85,
    ),
    Concept(
        "land_ramp",
        ("land ramp", "fetch lands from deck", "search for lands", "land acceleration"),
        ("otag:land-ramp", 'o:"search your library" o:"land"'),
        "Cards that put lands onto the battlefield",
        "ramp",
        80,
    ),
    Concept(
        "ritual",
        ("ritual", "fast mana", "burst mana", "one-shot mana"),
        ("otag:ritual",),
        "Spells that provide a temporary burst of mana",
        "ramp",
        75,
    ),
    Concept(
        "sol_ring_alternative",
        ("sol ring alternative", "adds 2 colorless", "adds cc", "produces 2 mana"),
        ('t:artifact o:"{C}{C}" o:"add"',),
        "Artifacts that add two or more mana like Sol Ring",
        "ramp",
        90,
        ("-t:land",),
    ),
    # Card draw.
    Concept(
        "card_draw",
        ("card draw", "draw engine", "card advantage"),
        ("otag:card-draw",),
        "Cards that draw cards",
        "draw",
        90,
    ),
    Concept("cantrip", ("cantrip", "replaces itself"), ("otag:cantrip",), "Cheap spells that replace themselves", "draw", 80),
    Concept(
        "wheel",
        ("wheel", "wheel effect", "discard and draw 7", "wheel of fortune"),
        ("otag:wheel",),
        "Cards that make players discard and draw seven",
        "draw",
        85,
    ),
    Concept(
        "looting",
        ("looting", "loot", "loot effect", "draw then discard"),
        ("otag:looting",),
        "Draw then discard effects",
        "draw",
        75,
    ),
    # Removal.
    Concept(
        "board_wipe",
        ("board wipe", "wrath", "sweeper", "mass removal", "destroy all", "wrath effect"),
        ("otag:board-wipe",),
        "Cards that destroy all creatures",
        "removal",
        90,
    ),
    Concept(
        "spot_removal",
        ("spot removal", "single target removal", "targeted removal", "destroy target"),
        ("otag:spot-removal", "otag:removal -otag:board-wipe"),
        "Single-target removal spells",
        "removal",
        80,
    ),
    Concept(
        "counterspell",
        ("counterspell", "counter magic", "counter spell", "counter target spell", "negate"),
        ("otag:counterspell",),
        "Cards that counter spells",
        "removal",
        90,
    ),
    Concept(
        "creature_removal",
        ("creature removal", "kill spell", "creature kill", "destroy creature"),
        ("otag:creature-removal",),
        "Spells that remove creatures",
        "removal",
        80,
    ),
    Concept(
        "graveyard_hate",
        ("graveyard hate", "graveyard removal", "exile graveyard"),
        ("otag:graveyard-hate",),
        "Cards that interact negatively with graveyards",
        "removal",
        75,
    ),
    # Tutors.
    Concept("tutor", ("tutor", "search library", "find any card"), ("otag:tutor",), "Cards that search your library", "tutor", 90),
    Concept("land_tutor", ("land tutor", "land search"), ("otag:land-tutor",), "Cards that search for lands", "tutor", 80),
    Concept(
        "creature_tutor",
        ("creature tutor", "find creature", "creature search"),
        ("otag:creature-tutor",),
        "Cards that search for creatures",
        "tutor",
        80,
    ),
    # Graveyard.
    Concept(
        "reanimation",
        ("reanimation", "reanimate", "raise dead", "return from graveyard", "graveyard to battlefield"),
        ("otag:reanimation",),
        "Cards that return creatures from the graveyard to the battlefield",
        "graveyard",
        85,
    ),
    Concept(
        "self_mill",
        ("self mill", "self-mill", "mill yourself", "mill myself"),
        ("otag:self-mill",),
        "Cards that mill your own library",
        "graveyard",
        80,
    ),
    Concept(
        "graveyard_recursion",
        ("recursion", "graveyard recursion", "recursive"),
        ("otag:graveyard-recursion",),
        "Cards that return things from the graveyard",
        "graveyard",
        80,
    ),
    # Blink and bounce.
    Concept(
        "blink",
        ("blink", "flicker", "exile and return", "etb abuse", "blink effect"),
        ("otag:blink", "otag:flicker"),
        "Cards that exile and return permanents",
        "blink",
        85,
    ),
    Concept("bounce", ("bounce", "return to hand", "unsummon effect"), ("otag:bounce",), "Cards that return permanents to hand", "blink", 75),
    # Sacrifice.
    Concept(
        "sacrifice_outlet",
        ("sacrifice outlet", "sac outlet", "free sac", "sacrifice for free"),
        ("otag:sacrifice-outlet",),
        "Cards that let you sacrifice permanents",
        "sacrifice",
        85,
    ),
    Concept(
        "aristocrats",
        ("aristocrats", "death triggers", "dies payoff", "blood artist effect"),
        ("otag:aristocrats", "otag:synergy-sacrifice"),
        "Cards that benefit from creatures dying",
        "sacrifice",
        85,
    ),
    # Tokens.
    Concept(
        "token_generator",
        ("token generator", "token maker", "creates token", "make token"),
        ("otag:token-generator",),
        "Cards that create creature tokens",
        "tokens",
        80,
    ),
    Concept(
        "treasure_tokens",
        ("treasure", "makes treasure", "treasure generator"),
        ("otag:treasure-generator",),
        "Cards that create treasure tokens",
        "tokens",
        80,
    ),
    # Control.
    Concept("stax", ("stax", "prison", "tax effects", "lockdown"), ("otag:stax",), "Cards that restrict what opponents can do", "control", 80),
    Concept("hatebear", ("hatebear", "hate creatures"), ("otag:hatebear",), "Creatures with disruptive abilities", "control", 80),
    # Lifegain.
    Concept("lifegain", ("lifegain", "life gain", "gain life", "healing"), ("otag:lifegain",), "Cards that gain life", "lifegain", 75),
    Concept(
        "soul_sisters",
        ("soul sisters", "soul warden", "gain life when creatures enter"),
        ("otag:soul-warden-ability",),
        "Cards that gain life when creatures enter",
        "lifegain",
        80,
    ),
    # Special.
    Concept(
        "extra_turn",
        ("extra turn", "take another turn", "time walk"),
        ("otag:extra-turn",),
        "Cards that grant extra turns",
        "special",
        90,
    ),
    Concept(
        "untapper",
        ("untapper", "untap permanents", "untap creatures", "untap"),
        ("otag:untapper",),
        "Cards that untap permanents",
        "special",
        75,
        ('-o:"untapped"',),
    ),
    Concept(
        "gives_flash",
        ("gives flash", "flash enabler", "cast at instant speed", "flash to creatures"),
        ("otag:gives-flash",),
        "Cards that give flash to other cards",
        "special",
        80,
    ),
    Concept("clone", ("clone", "copy creature", "copy permanent"), ("otag:clone",), "Cards that copy other permanents", "special", 80),
    # Lands.
    Concept("fetchland", ("fetch land", "fetchland", "fetches"), ("is:fetchland",), "Lands that sacrifice to search for other lands", "lands", 90),
    Concept("shockland", ("shock land", "shockland", "shocks"), ("is:shockland",), "Dual lands that deal 2 damage to enter untapped", "lands", 90),
    Concept("dual_land", ("dual land", "duals", "original duals", "abur duals"), ("is:dual",), "Original dual lands", "lands", 90),
    Concept(
        "mdfc_land",
        ("mdfc land", "modal land", "double faced land"),
        ("is:mdfc t:land",),
        "Modal double-faced lands",
        "lands",
        85,
    ),
)
