from __future__ import annotations

from gamedb.records import AdminUser, Item, ItemRewardRef, Material, QuestDefinition, QuestObjective, Skill
from gamedb.settings import MigrationSettings


MATERIALS: list[Material] = [
    Material(
        name="Fa",
        type="raw",
        rarity="common",
        description="Alapvető nyersanyag építkezéshez és kézművességhez.",
        icon="wood.png",
        base_value=5,
        weight=1.0,
        stack_size=100,
        gather_skill="favágás",
        gather_time=5,
    ),
    Material(
        name="Kő",
        type="raw",
        rarity="common",
        description="Kemény kő, építkezéshez és eszközök készítéséhez.",
        icon="stone.png",
        base_value=8,
        weight=2.5,
        stack_size=50,
        gather_skill="bányászat",
        gather_time=8,
    ),
    Material(
        name="Vasérc",
        type="ore",
        rarity="uncommon",
        description="Nyers vasérc, feldolgozás után használható fegyverek és páncélok készítéséhez.",
        icon="iron_ore.png",
        base_value=20,
        weight=3.0,
        stack_size=25,
        gather_skill="bányászat",
        gather_level=10,
        gather_time=12,
        smelt_result="vasrúd",
        smelt_amount=1,
        smelt_time=30,
    ),
    Material(
        name="Gyógyfű",
        type="herb",
        rarity="common",
        description="Ritka gyógyfű, gyógyitalok készítéséhez használható.",
        icon="herb.png",
        base_value=15,
        weight=0.2,
        stack_size=50,
        gather_skill="gyűjtögetés",
        gather_time=6,
    ),
    Material(
        name="Bőr",
        type="leather",
        rarity="common",
        description="Feldolgozott állatbőr, páncélok és felszerelések készítéséhez.",
        icon="leather.png",
        base_value=12,
        weight=1.5,
        stack_size=40,
        craft_material=True,
        processed_from="nyers_bőr",
        process_time=10,
    ),
]


BRONZE_SWORD = "Bronz Kard"
FIRST_AID = "Elsősegély"

ITEMS: list[Item] = [
    Item(
        name=BRONZE_SWORD,
        type="weapon",
        rarity="common",
        damage=10,
        value=50,
        weight=2.5,
        description="Egyszerű bronz kard kezdő harcosoknak.",
        icon="bronze_sword.png",
    ),
    Item(
        name="Bőrpáncél",
        type="armor",
        rarity="common",
        defense=5,
        value=30,
        weight=5,
        description="Egyszerű bőrpáncél védelmet nyújt a harcosoknak.",
        icon="leather_armor.png",
    ),
    Item(
        name="Gyógyító Bájital",
        type="potion",
        rarity="uncommon",
        effect="heal",
        value=25,
        weight=0.5,
        description="Gyógyítja a sérüléseket és visszatölt egy kis életerőt.",
        icon="health_potion.png",
    ),
    Item(
        name="Ősi Érem",
        type="currency",
        rarity="rare",
        value=100,
        weight=0.1,
        description="Ősi érmék, amelyeket a játék különleges árucikkeinek megvásárlására lehet használni.",
        icon="ancient_coin.png",
    ),
]


SKILLS: list[Skill] = [
    Skill(
        name="Erőteljes Csapás",
        type="active",
        description="Egy erős, kivitelezett csapás az ellenfél ellen.",
        damage=15,
        mana_cost=10,
        cooldown=5,
        level=1,
        icon="power_strike.png",
    ),
    Skill(
        name=FIRST_AID,
        type="active",
        description="Gyógyítsd meg magad vagy szövetségesedet egy kis mennyiségű életerővel.",
        heal=10,
        mana_cost=8,
        cooldown=8,
        level=1,
        icon="first_aid.png",
    ),
]


QUESTS: list[QuestDefinition] = [
    QuestDefinition(
        title="Első Lépések",
        description="Ismerkedj meg a játékkal és szerezz tapasztalati pontokat!",
        objectives=[
            QuestObjective(description="Járj körbe a faluban"),
            QuestObjective(description="Beszélj a falusi főemberrel"),
            QuestObjective(description="Gyűjts össze 5 darab gyógyfüvet", target=5, current=0),
        ],
        experience=100,
        reward_items=[ItemRewardRef(item=BRONZE_SWORD, quantity=1)],
        reward_skills=[FIRST_AID],
        min_level=1,
        max_level=5,
        repeatable=False,
        npc_giver="Falusi Főember",
        npc_turn_in="Falusi Főember",
    ),
]


def admin_user(settings: MigrationSettings, password_hash: str) -> AdminUser:
    return AdminUser(username=settings.admin_username, email=settings.admin_email, password=password_hash)
