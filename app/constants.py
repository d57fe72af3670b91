"""Static reading plan, book and badge tables."""
from typing import Dict, List

from app.models.schemas import Badge, ReadingPlan

# Books in canonical order with their chapter counts
BIBLE_BOOKS: List[Dict[str, object]] = [
    {"name": "Gênesis", "chapters": 50}, {"name": "Êxodo", "chapters": 40}, {"name": "Levítico", "chapters": 27},
    {"name": "Números", "chapters": 36}, {"name": "Deuteronômio", "chapters": 34}, {"name": "Josué", "chapters": 24},
    {"name": "Juízes", "chapters": 21}, {"name": "Rute", "chapters": 4}, {"name": "1 Samuel", "chapters": 31},
    {"name": "2 Samuel", "chapters": 24}, {"name": "1 Reis", "chapters": 22}, {"name": "2 Reis", "chapters": 25},
    {"name": "1 Crônicas", "chapters": 29}, {"name": "2 Crônicas", "chapters": 36}, {"name": "Esdras", "chapters": 10},
    {"name": "Neemias", "chapters": 13}, {"name": "Ester", "chapters": 10}, {"name": "Jó", "chapters": 42},
    {"name": "Salmos", "chapters": 150}, {"name": "Provérbios", "chapters": 31}, {"name": "Eclesiastes", "chapters": 12},
    {"name": "Cânticos", "chapters": 8}, {"name": "Isaías", "chapters": 66}, {"name": "Jeremias", "chapters": 52},
    {"name": "Lamentações", "chapters": 5}, {"name": "Ezequiel", "chapters": 48}, {"name": "Daniel", "chapters": 12},
    {"name": "Oseias", "chapters": 14}, {"name": "Joel", "chapters": 3}, {"name": "Amós", "chapters": 9},
    {"name": "Obadias", "chapters": 1}, {"name": "Jonas", "chapters": 4}, {"name": "Miqueias", "chapters": 7},
    {"name": "Naum", "chapters": 3}, {"name": "Habacuque", "chapters": 3}, {"name": "Sofonias", "chapters": 3},
    {"name": "Ageu", "chapters": 2}, {"name": "Zacarias", "chapters": 14}, {"name": "Malaquias", "chapters": 4},
    {"name": "Mateus", "chapters": 28}, {"name": "Marcos", "chapters": 16}, {"name": "Lucas", "chapters": 24},
    {"name": "João", "chapters": 21}, {"name": "Atos", "chapters": 28}, {"name": "Romanos", "chapters": 16},
    {"name": "1 Coríntios", "chapters": 16}, {"name": "2 Coríntios", "chapters": 13}, {"name": "Gálatas", "chapters": 6},
    {"name": "Efésios", "chapters": 6}, {"name": "Filipenses", "chapters": 4}, {"name": "Colossenses", "chapters": 4},
    {"name": "1 Tessalonicenses", "chapters": 5}, {"name": "2 Tessalonicenses", "chapters": 3}, {"name": "1 Timóteo", "chapters": 6},
    {"name": "2 Timóteo", "chapters": 4}, {"name": "Tito", "chapters": 3}, {"name": "Filemom", "chapters": 1},
    {"name": "Hebreus", "chapters": 13}, {"name": "Tiago", "chapters": 5}, {"name": "1 Pedro", "chapters": 5},
    {"name": "2 Pedro", "chapters": 3}, {"name": "1 João", "chapters": 5}, {"name": "2 João", "chapters": 1},
    {"name": "3 João", "chapters": 1}, {"name": "Judas", "chapters": 1}, {"name": "Apocalipse", "chapters": 22},
]

BOOK_CHAPTERS: Dict[str, int] = {book["name"]: book["chapters"] for book in BIBLE_BOOKS}

_OLD_TESTAMENT = [book["name"] for book in BIBLE_BOOKS[:39]]
_NEW_TESTAMENT = [book["name"] for book in BIBLE_BOOKS[39:]]

ACHIEVEMENT_BADGES: List[Badge] = [
    Badge(id="streak_7", label="Início Firme",
          description="Completou 7 dias de leitura consecutiva.", days_required=7, icon_name="star"),
    Badge(id="streak_30", label="Hábito Criado",
          description="Alcançou 30 dias seguidos de devocional.", days_required=30, icon_name="flame"),
    Badge(id="streak_100", label="Centenário",
          description="Uma jornada incrível de 100 dias na Palavra.", days_required=100, icon_name="crown"),
    Badge(id="streak_365", label="Bíblia Completa",
          description="Você leu a Bíblia toda em um ano!", days_required=365, icon_name="award"),
]

READING_PLANS: List[ReadingPlan] = [
    ReadingPlan(id="whole_bible", label="Bíblia Completa",
                description="Gênesis a Apocalipse em 1 ano (365 dias).", days=365),
    ReadingPlan(id="custom", label="Plano Personalizado",
                description="Escolha um livro e defina seu ritmo.", days=0),
    ReadingPlan(id="pentateuch", label="Pentateuco",
                description="Os 5 livros da Lei: Gênesis a Deuteronômio.", days=90,
                books=_OLD_TESTAMENT[:5]),
    ReadingPlan(id="historical", label="Livros Históricos",
                description="A história de Israel: Josué a Ester.", days=90,
                books=_OLD_TESTAMENT[5:17]),
    ReadingPlan(id="poetic", label="Sapienciais e Poéticos",
                description="Sabedoria e Salmos: Jó a Cânticos.", days=60,
                books=_OLD_TESTAMENT[17:22]),
    ReadingPlan(id="prophetic", label="Livros Proféticos",
                description="Mensagens dos Profetas: Isaías a Malaquias.", days=90,
                books=_OLD_TESTAMENT[22:]),
    ReadingPlan(id="gospels", label="Evangelhos",
                description="Vida de Jesus: Mateus, Marcos, Lucas e João.", days=45,
                books=_NEW_TESTAMENT[:4]),
    ReadingPlan(id="acts", label="Atos dos Apóstolos",
                description="O início da Igreja Primitiva.", days=14, books=["Atos"]),
    ReadingPlan(id="epistles", label="Cartas (Epístolas)",
                description="Doutrina para a Igreja: Romanos a Judas.", days=60,
                books=_NEW_TESTAMENT[5:26]),
    ReadingPlan(id="revelation", label="Apocalipse",
                description="A revelação do fim dos tempos.", days=14, books=["Apocalipse"]),
    ReadingPlan(id="new_testament", label="Novo Testamento Completo",
                description="De Mateus a Apocalipse.", days=120, books=_NEW_TESTAMENT),
    ReadingPlan(id="old_testament", label="Antigo Testamento Completo",
                description="De Gênesis a Malaquias.", days=260, books=_OLD_TESTAMENT),
]

PLANS_BY_ID: Dict[str, ReadingPlan] = {plan.id: plan for plan in READING_PLANS}
