from typing import List

from mongo_migrator.models import AnswerSet, Domain, MigrationConfig, Question

ORIGIN_STYLE = "blue"
DESTINATION_STYLE = "green"
GLOBAL_STYLE = "grey50"


def default_db_prompt(answers: AnswerSet) -> str:
    return f"What database should we import the data to? (Defaults to '{answers.origin.get('db', '')}')"


def default_collection_prompt(answers: AnswerSet) -> str:
    return (f"What collection(s) should we import the data to? "
            f"(Defaults to '{answers.origin.get('collection', '')}')")


# The will-import question must stay ahead of every destination question
QUESTIONS: List[Question] = [
    Question(domain=Domain.ORIGIN, key="host", prompt="What is the host of the origin server? (Defaults to 'localhost')", display_style=ORIGIN_STYLE),
    Question(domain=Domain.ORIGIN, key="port", prompt="What is the port of the origin server? (Defaults to '27017')", display_style=ORIGIN_STYLE),
    Question(domain=Domain.ORIGIN, key="username", prompt="What is the username of the origin server? (Defaults to 'none')", display_style=ORIGIN_STYLE),
    Question(domain=Domain.ORIGIN, key="password", prompt="What is the password of the origin server? (Defaults to 'none')", display_style=ORIGIN_STYLE),
    Question(domain=Domain.ORIGIN, key="db", prompt="What database should we export the data from? [Mandatory]", display_style=ORIGIN_STYLE),
    Question(domain=Domain.ORIGIN, key="collection", prompt="What collection(s) should we export? Separate several with commas [Mandatory]", display_style=ORIGIN_STYLE),

    Question(domain=Domain.GLOBAL, key="willImport", prompt="An import operation should be performed? (Defaults to 'Yes')", display_style=GLOBAL_STYLE),

    Question(domain=Domain.DESTINATION, key="host", prompt="What is the host of the destination server? (Defaults to 'localhost')", display_style=DESTINATION_STYLE),
    Question(domain=Domain.DESTINATION, key="port", prompt="What is the port of the destination server? (Defaults to '27017')", display_style=DESTINATION_STYLE),
    Question(domain=Domain.DESTINATION, key="username", prompt="What is the username of the destination server? (Defaults to 'none')", display_style=DESTINATION_STYLE),
    Question(domain=Domain.DESTINATION, key="password", prompt="What is the password of the destination server? (Defaults to 'none')", display_style=DESTINATION_STYLE),
    Question(domain=Domain.DESTINATION, key="db", prompt=default_db_prompt, display_style=DESTINATION_STYLE),
    Question(domain=Domain.DESTINATION, key="collection", prompt=default_collection_prompt, display_style=DESTINATION_STYLE),

    Question(domain=Domain.GLOBAL, key="keepBackup", prompt="Should we keep the temporary export files as a backup? (Defaults to 'Yes')", display_style=GLOBAL_STYLE),
]

# Default run configuration; command line flags override individual fields
MIGRATION_CONFIG = MigrationConfig(
    temp_dir="temp",
    export_binary="mongoexport",
    import_binary="mongoimport",
    dry_run=False,
    show_progress=True,
)
