"""Prompt templates for transaction classification, in English and French."""

from collections.abc import Iterable

from categorizer.core.models import UNKNOWN_DESTINATION

PROMPTS = {
    "EN": {
        "intro": "I want to categorize transactions on my bank account.",
        "subject_language": "The subject is in English.",
        "question": (
            'In which category would a transaction ({type}){destination} with the subject "{description}" fall into?'
        ),
        "destination": ' from "{name}"',
        "categories": "The categories are:",
        "accounts": (
            "Also suggest the most appropriate destination account from the list below, "
            "or suggest a new account name if none match. Use only the company/merchant name "
            "(e.g. 'Amazon', 'Generali'), not the category:"
        ),
        "budgets": "Also pick the most appropriate budget from the list below:",
        "format": (
            "Respond ONLY with a single JSON object and no other text, with the keys {keys}. "
            "Ignore any long string of numbers or special characters. Example: {example}"
        ),
    },
    "FR": {
        "intro": "Je veux catégoriser les transactions de mon compte bancaire.",
        "subject_language": "Le sujet est en français.",
        "question": (
            'Dans quelle catégorie une transaction ({type}){destination} avec le sujet "{description}" '
            "correspond-elle ?"
        ),
        "destination": ' de "{name}"',
        "categories": "Les catégories sont :",
        "accounts": (
            "Suggère aussi le compte destinataire le plus approprié dans la liste ci-dessous, "
            "ou suggère un nouveau nom de compte si aucun ne correspond. Utilise seulement le nom "
            "de l'entreprise/marchand (ex : 'Amazon', 'Generali'), pas la catégorie :"
        ),
        "budgets": "Choisis aussi le budget le plus approprié dans la liste ci-dessous :",
        "format": (
            "Réponds UNIQUEMENT avec un seul objet JSON, sans autre texte, avec les clés {keys}. "
            "Ignore toute longue chaîne de chiffres ou de caractères spéciaux. Exemple : {example}"
        ),
    },
}

EXAMPLES = {
    "EN": {"category": "Groceries", "destinationAccount": "Intermarché", "budget": "Household"},
    "FR": {"category": "Alimentation", "destinationAccount": "Intermarché", "budget": "Maison"},
}


def has_destination(destination_name: str | None) -> bool:
    """Whether the ledger gave us a usable destination name."""
    return bool(destination_name) and destination_name != UNKNOWN_DESTINATION


def build_prompt(
    language: str,
    categories: Iterable[str],
    destination_name: str | None,
    description: str,
    transaction_type: str,
    accounts: Iterable[str] = (),
    want_account: bool = False,
    budgets: Iterable[str] = (),
    want_budget: bool = False,
) -> str:
    """Render the classification prompt for one transaction."""
    texts = PROMPTS[language]
    destination = texts["destination"].format(name=destination_name) if has_destination(destination_name) else ""
    keys = ["category"]
    if want_account:
        keys.append("destinationAccount")
    if want_budget:
        keys.append("budget")
    example = ", ".join(f'"{key}": "{EXAMPLES[language][key]}"' for key in keys)

    sections = [
        texts["intro"],
        texts["subject_language"],
        texts["question"].format(type=transaction_type, destination=destination, description=description),
        f"{texts['categories']}\n{', '.join(sorted(categories))}",
    ]
    if want_account:
        sections.append(f"{texts['accounts']}\n{', '.join(sorted(accounts))}")
    if want_budget:
        sections.append(f"{texts['budgets']}\n{', '.join(sorted(budgets))}")
    sections.append(texts["format"].format(keys=", ".join(f'"{key}"' for key in keys), example=f"{{{example}}}"))
    return "\n\n".join(sections)
