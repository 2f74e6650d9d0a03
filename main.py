from sys import exit

from data_management import page_card_types, page_deck_size, page_list, page_tuning
from graphing import page_graph
from loading import import_deck_prompt, page_import_decklist, page_load, page_save, page_share
from sampling import page_sample_reveals
from strategy import page_calculate_strategy
from utility import *


def page_exit():
    clear_screen()
    console.print("[header]Exiting program.[/header]")
    exit()


def main():
    setup_logging()
    import_deck_prompt()
    while True:
        clear_screen()
        console.print("[header]Main Page[/header]\n")
        console.print("[info]1.[/info] [text]Deck Size[/text]")
        console.print("[info]2.[/info] [text]Card Types[/text]")
        console.print("[info]3.[/info] [text]Mulligan Settings[/text]")
        console.print("[info]4.[/info] [text]Mulligan Strategy[/text]")
        console.print("[info]5.[/info] [text]Sample Opening Hands[/text]")
        console.print("[info]6.[/info] [text]Graphs[/text]")
        console.print("[info]7.[/info] [text]Load Deck/JSON[/text]")
        console.print("[info]8.[/info] [text]Save to File[/text]")
        console.print("[info]9.[/info] [text]Show All State[/text]")
        console.print("[info]10.[/info] [text]Import Decklist[/text]")
        console.print("[info]11.[/info] [text]Share Code[/text]")
        console.print("[info]12.[/info] [text]Exit[/text]")
        choice = console.input("[prompt]> [/prompt]")

        match choice:
            case "1":
                page_deck_size()
            case "2":
                page_card_types()
            case "3":
                page_tuning()
            case "4":
                page_calculate_strategy()
            case "5":
                page_sample_reveals()
            case "6":
                page_graph()
            case "7":
                page_load()
            case "8":
                page_save()
            case "9":
                page_list()
            case "10":
                page_import_decklist()
            case "11":
                page_share()
            case "12":
                page_exit()
            case _:
                console.print("[error]Invalid option.[/error]")
                pause()


if __name__ == "__main__":
    main()
