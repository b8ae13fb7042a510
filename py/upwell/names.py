"""Placeholder names for drafts created without a message."""

import random

DESSERTS = (
    "Apple Crumble", "Baklava", "Banana Split", "Black Forest Cake",
    "Blueberry Cobbler", "Bread Pudding", "Brownie", "Cannoli",
    "Carrot Cake", "Cheesecake", "Chocolate Mousse", "Churros",
    "Creme Brulee", "Cupcake", "Eclair", "Flan", "Fudge", "Gelato",
    "Key Lime Pie", "Lemon Tart", "Macaron", "Madeleine", "Mochi",
    "Panna Cotta", "Pavlova", "Peach Melba", "Pecan Pie", "Profiterole",
    "Rice Pudding", "Sorbet", "Sticky Toffee Pudding", "Strawberry Shortcake",
    "Tiramisu", "Trifle", "Tres Leches", "Victoria Sponge",
)


def random_dessert(rng: random.Random = random) -> str:
    return rng.choice(DESSERTS)
