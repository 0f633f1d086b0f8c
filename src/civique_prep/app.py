"""Interactive CLI application."""
import logging
import string

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from civique_prep.bank import QuestionBank
from civique_prep.dashboard import (
    format_duration, format_time, get_progress_overview, get_score_color,
    get_timer_color, get_topic_breakdown, get_topic_label, group_wrong_by_topic,
)
from civique_prep.db import DEFAULT_DB_PATH, init_db
from civique_prep.exam import FINISHED, ExamSession
from civique_prep.history import get_exam_stats, save_exam_result
from civique_prep.logging_setup import configure_logging
from civique_prep.models import ExamResult, Question
from civique_prep.practice import WRONG_COUNT_FILTERS, MistakePractice
from civique_prep.progress import UserProgressStore
from civique_prep.quiz import TopicQuiz
from civique_prep.topic_progress import TopicProgressStore

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")

# Prompt labels for the practice mode and question kind ids
MODE_LABELS = {"revision": "review", "sprint": "sprint"}
KIND_LABELS = {"tous": "all", "qcm": "choice", "situation": "situation"}


class SessionExitRequested(Exception):
    """Raised when the user types q/menu inside a session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer is not None and answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def choice_letters(question: Question) -> dict[str, str]:
    """Map display letters a, b, c... to choice ids."""
    return {letter: c.id for letter, c in zip(string.ascii_lowercase, question.choices)}


def show_question(question: Question, title: str, selected: str | None = None) -> dict[str, str]:
    letters = choice_letters(question)
    lines = [f"[bold]{question.stem}[/bold]\n"]
    for letter, choice in zip(letters, question.choices):
        marker = " [cyan]◀[/cyan]" if choice.id == selected else ""
        lines.append(f"  [cyan]{letter})[/cyan] {choice.text}{marker}")
    console.print(Panel("\n".join(lines), title=title, border_style="blue"))
    return letters


def show_feedback(question: Question, is_correct: bool) -> None:
    correct = question.correct_choice()
    if is_correct:
        console.print("[green]Bonne réponse ![/green]")
    else:
        console.print(f"[red]Mauvaise réponse.[/red] Réponse : [green]{correct.text if correct else '?'}[/green]")
    if question.analysis:
        console.print(f"[dim]{question.analysis}[/dim]")
    console.print()


def show_welcome():
    console.print(Panel(
        "[bold]Examen civique[/bold]\n[dim]Préparation à l'examen de citoyenneté[/dim]",
        title="Bienvenue", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commandes :[/bold]")
    commands = [
        ("quiz", "S'entraîner sur un thème"),
        ("examen", "Examen blanc chronométré (40 questions, 45 min)"),
        ("erreurs", "Réviser le carnet d'erreurs"),
        ("favoris", "Revoir les questions favorites"),
        ("progression", "Réussite, erreurs et historique des examens"),
        ("effacer", "Effacer les données de progression"),
        ("quitter", "Quitter"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def run_topic_quiz(quiz: TopicQuiz) -> tuple[int, int]:
    if not quiz.load():
        console.print(f"[red]{quiz.error}[/red]")
        return 0, 0
    total = len(quiz.questions)
    console.print(f"\n[bold]{get_topic_label(quiz.topic_id)}[/bold] — {total} questions\n")
    while not quiz.is_finished:
        question = quiz.current_question
        letters = show_question(question, f"Question {quiz.current_index + 1}/{total}")
        letter = session_prompt("Votre réponse", choices=list(letters) + list(EXIT_WORDS), show_choices=False)
        is_correct = quiz.submit_answer(letters[letter])
        show_feedback(question, is_correct)
        quiz.next_question()
    console.print(f"[bold]Score : {quiz.score}/{total} ({quiz.score / total * 100:.0f}%)[/bold]\n")
    return quiz.score, total


def show_exam_result(result: ExamResult) -> None:
    color = get_score_color(result.percentage)
    title = "Félicitations !" if result.passed else "Examen terminé"
    console.print(Panel(
        f"[{color}][bold]{result.score} / {result.total}[/bold] ({result.percentage}%)[/{color}]\n"
        f"Durée : {format_duration(result.duration)}",
        title=title, border_style=color,
    ))
    table = Table(title="Par thème")
    table.add_column("Thème", style="cyan")
    table.add_column("Score", justify="right")
    for row in get_topic_breakdown(result):
        pct_color = get_score_color(row["percentage"])
        table.add_row(row["name"], f"[{pct_color}]{row['correct']}/{row['total']}[/{pct_color}]")
    situation = result.topic_scores.get("situation")
    if situation:
        table.add_row(get_topic_label("situation"), f"{situation.correct}/{situation.total}")
    console.print(table)

    for topic_id, wrongs in group_wrong_by_topic(result).items():
        console.print(f"\n[bold]{get_topic_label(topic_id)}[/bold] — {len(wrongs)} erreur(s)")
        for wrong in wrongs:
            answered = next((c.text for c in wrong.question.choices if c.id == wrong.user_answer), "—")
            correct = next((c.text for c in wrong.question.choices if c.id == wrong.correct_answer), "?")
            console.print(f"  • {wrong.question.stem}")
            console.print(f"    [red]{answered}[/red] → [green]{correct}[/green]")


def run_exam(exam: ExamSession) -> ExamResult | None:
    if not exam.start_exam():
        console.print(f"[red]{exam.error}[/red]")
        return None
    console.print("[dim]Répondez par une lettre ; n/p pour naviguer, g <num> pour aller à une question, valider pour terminer.[/dim]")
    while exam.status != FINISHED:
        item = exam.current_question
        color = get_timer_color(exam.time_remaining)
        title = (
            f"Question {exam.current_index + 1}/{exam.total_questions}  "
            f"[{color}]{format_time(exam.time_remaining)}[/{color}]  "
            f"{exam.answered_count} répondue(s)"
        )
        letters = show_question(item.question, title, exam.user_answers.get(item.id))
        command = session_prompt("Réponse").strip().lower()
        exam.sync_clock()
        if exam.status == FINISHED:
            console.print("[yellow]Temps écoulé, l'examen a été remis.[/yellow]")
            break
        if command in letters:
            exam.select_answer(item.id, letters[command])
            exam.next_question()
        elif command == "n":
            exam.next_question()
        elif command == "p":
            exam.prev_question()
        elif command.startswith("g ") and command[2:].strip().isdigit():
            exam.go_to_question(int(command[2:].strip()) - 1)
        elif command == "valider":
            unanswered = exam.total_questions - exam.answered_count
            if unanswered and Prompt.ask(
                f"{unanswered} question(s) sans réponse. Valider quand même ?", choices=["o", "n"], default="n",
            ) != "o":
                continue
            exam.finish_exam()
        else:
            console.print("[red]Commande inconnue.[/red]")
    show_exam_result(exam.result)
    return exam.result


def run_mistake_practice(practice: MistakePractice) -> None:
    if not practice.queue:
        console.print("[yellow]Aucune erreur ne correspond à ces filtres.[/yellow]")
        return
    console.print("[dim]Répondez par une lettre ; m = maîtrisée, f = favori, s = mélanger, q = quitter.[/dim]")
    while practice.queue:
        record = practice.current_record
        title = (
            f"{get_topic_label(record.topic_id)} · ratée {record.count} fois  "
            f"[dim]{practice.session_answered} répondue(s) · {practice.accuracy}%[/dim]"
        )
        letters = show_question(record.question, title)
        command = session_prompt("Réponse").strip().lower()
        if command == "m":
            practice.mark_mastered()
            console.print("[green]Retirée du carnet d'erreurs.[/green]\n")
            continue
        if command == "f":
            state = practice.toggle_bookmark()
            console.print("[cyan]Ajoutée aux favoris.[/cyan]" if state else "[dim]Retirée des favoris.[/dim]")
            continue
        if command == "s":
            practice.reshuffle()
            continue
        if command not in letters:
            console.print("[red]Commande inconnue.[/red]")
            continue
        show_feedback(record.question, practice.select_choice(letters[command]))
        practice.next()
    console.print("[green]Le carnet d'erreurs est vide. Bravo ![/green]")


def cmd_quiz(bank: QuestionBank, store: UserProgressStore, tracker: TopicProgressStore):
    topics = bank.list_topics()
    if not topics:
        console.print("[red]Aucune banque de questions trouvée.[/red]")
        return
    for i, topic_id in enumerate(topics, 1):
        console.print(f"  [cyan]{i}[/cyan]) {get_topic_label(topic_id)}")
    index = session_int_prompt("Choisissez un thème", choices=[str(i) for i in range(1, len(topics) + 1)])
    run_topic_quiz(TopicQuiz(topics[index - 1], bank, store, tracker=tracker))


def cmd_exam(bank: QuestionBank, store: UserProgressStore, db_path: str):
    result = run_exam(ExamSession(bank, store))
    if result is not None:
        save_exam_result(db_path, result)


def cmd_mistakes(store: UserProgressStore):
    if not store.mistakes:
        console.print("[yellow]Votre carnet d'erreurs est vide ![/yellow]")
        return
    mode = MODE_LABELS[Prompt.ask("Mode", choices=list(MODE_LABELS), default="revision")]
    practice = MistakePractice(store, mode=mode)
    kind = KIND_LABELS[Prompt.ask("Type de question", choices=list(KIND_LABELS), default="tous")]
    if kind != "all":
        practice.set_kind(kind)
    options = practice.topic_options()
    if len(options) > 1:
        topic = Prompt.ask("Thème", choices=["tous"] + options, default="tous")
        if topic != "tous":
            practice.set_topic(topic)
    min_count = Prompt.ask(
        "Nombre minimum d'erreurs", choices=[str(n) for n in WRONG_COUNT_FILTERS], default="1",
    )
    if min_count != "1":
        practice.set_min_wrong_count(int(min_count))
    run_mistake_practice(practice)


def cmd_bookmarks(store: UserProgressStore):
    bookmarks = store.list_bookmarks()
    if not bookmarks:
        console.print("[yellow]Aucun favori pour l'instant.[/yellow]")
        return
    for i, record in enumerate(bookmarks, 1):
        question = record.question
        letters = show_question(question, f"Favori {i}/{len(bookmarks)} · {get_topic_label(record.topic_id)}")
        letter = session_prompt(
            "Votre réponse (r pour retirer)", choices=list(letters) + ["r"] + list(EXIT_WORDS), show_choices=False,
        )
        if letter == "r":
            store.toggle_bookmark(question, record.topic_id)
            console.print("[dim]Favori retiré.[/dim]\n")
            continue
        show_feedback(question, question.is_correct(letters[letter]))


def cmd_progress(store: UserProgressStore, tracker: TopicProgressStore, db_path: str):
    overview = get_progress_overview(store, tracker)
    table = Table(title="Réussite par thème")
    table.add_column("Thème", style="cyan")
    table.add_column("Réponses", justify="right")
    table.add_column("Réussite", justify="right")
    for row in overview["topics"]:
        color = get_score_color(row["accuracy"])
        table.add_row(row["name"], str(row["total_answered"]), f"[{color}]{row['accuracy']}%[/{color}]")
    console.print(table)

    console.print(
        f"\n  Erreurs : [bold]{overview['mistakes_total']}[/bold] "
        f"({overview['mistakes_choice']} QCM, {overview['mistakes_situation']} mises en situation, "
        f"{overview['repeat_mistakes']} ratées au moins deux fois)  |  "
        f"Favoris : [bold]{overview['bookmarks_total']}[/bold]"
    )
    stats = get_exam_stats(db_path)
    console.print(
        f"  Examens : [bold]{stats['attempts']}[/bold]  |  Meilleur : [bold]{stats['best']}%[/bold]  |  "
        f"Moyenne : [bold]{stats['average']}%[/bold]  |  Réussis : [bold]{stats['passed']}[/bold]"
    )


def cmd_reset(store: UserProgressStore, tracker: TopicProgressStore):
    target = Prompt.ask("Effacer quoi ?", choices=["erreurs", "favoris", "progression", "annuler"], default="annuler")
    if target == "erreurs":
        store.clear_all_mistakes()
    elif target == "favoris":
        store.clear_all_bookmarks()
    elif target == "progression":
        tracker.reset_all_progress()
    else:
        return
    console.print(f"[green]{target.capitalize()} effacé(e)s.[/green]")


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    store = UserProgressStore(db_path)
    tracker = TopicProgressStore(db_path)
    bank = QuestionBank()

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="quiz").strip().lower()
        try:
            if choice == "quiz":
                cmd_quiz(bank, store, tracker)
            elif choice == "examen":
                cmd_exam(bank, store, db_path)
            elif choice == "erreurs":
                cmd_mistakes(store)
            elif choice == "favoris":
                cmd_bookmarks(store)
            elif choice == "progression":
                cmd_progress(store, tracker, db_path)
            elif choice == "effacer":
                cmd_reset(store, tracker)
            elif choice in ("quitter", "q"):
                console.print("[dim]Bon courage pour l'examen ![/dim]")
                break
            else:
                console.print("[red]Commande inconnue. Réessayez.[/red]")
        except SessionExitRequested:
            console.print("[dim]Retour au menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Tapez 'quitter' pour sortir.[/dim]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Erreur : {e}[/red]")


if __name__ == "__main__":
    main()
