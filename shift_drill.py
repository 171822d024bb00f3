#!/usr/bin/env python3
"""
Shift Drill — Raw-terminal cipher typing drill with a live per-letter diff.
Features:
- Shows a word and asks for its +1 letter shift (a->b, ..., z->a)
- Live three-line diff while typing: green/red letters, with overshoot
  markers above and undershoot markers below each wrong letter
- Common words (first 100 of the list) drawn half of the time
- Per-letter mistake tally, attributed to the source letter, printed on exit
- Keys: a-z=type, backspace=delete, enter=skip, tab=reveal, esc=quit
"""

import abc
import contextlib
import curses.ascii
import logging
import os
import random
import select
import signal
import sys
import termios
import tty

# ---------------------------------------------------------------------------
# Word list — newline separated; the first COMMON_POOL_SIZE lines are the
# common pool
# ---------------------------------------------------------------------------
WORD_LIST = """\
the
be
to
of
and
a
in
that
have
i
it
for
not
on
with
he
as
you
do
at
this
but
his
by
from
they
we
say
her
she
or
an
will
my
one
all
would
there
their
what
so
up
out
if
about
who
get
which
go
me
when
make
can
like
time
no
just
him
know
take
people
into
year
your
good
some
could
them
see
other
than
then
now
look
only
come
its
over
think
also
back
after
use
two
how
our
work
first
well
way
even
new
want
because
any
these
give
day
most
us
ability
absent
accept
account
across
action
active
actual
adjust
admire
advice
afford
afraid
agency
almost
amount
animal
answer
anyone
appear
around
arrive
artist
attach
attack
autumn
avenue
backup
badge
ballot
banana
barrel
basket
battle
beauty
become
before
behind
belief
better
beyond
bitter
blanket
border
borrow
bottle
bottom
bounce
branch
breath
bridge
bright
broken
bubble
bucket
budget
bundle
burden
butter
button
cabinet
camera
candle
canvas
carbon
career
carpet
castle
cattle
cellar
center
cereal
chance
change
charge
cheese
cherry
choice
circle
client
closet
coffee
collar
column
comedy
copper
corner
cotton
county
cousin
cradle
crayon
credit
crisis
custom
damage
danger
dealer
debate
decade
defend
degree
desert
design
detail
device
dinner
direct
doctor
dollar
domain
double
dragon
drawer
driver
during
eagle
effort
eighty
either
eleven
empire
enable
engine
enough
escape
estate
except
expert
fabric
factor
family
farmer
father
fellow
figure
finger
finish
flavor
flight
flower
follow
forest
forget
formal
fossil
frozen
future
galaxy
garage
garden
gather
gentle
ginger
glance
global
golden
govern
gravel
guitar
hammer
handle
harbor
health
height
helmet
hidden
hollow
honest
hunger
hunter
island
jacket
jungle
junior
kettle
kidney
kitten
ladder
lawyer
leader
legend
lesson
letter
liquid
listen
little
lizard
lumber
magnet
marble
market
meadow
method
middle
mirror
modest
moment
monkey
mother
motion
muffin
museum
napkin
narrow
nature
needle
nephew
noodle
number
object
office
orange
oyster
paddle
palace
parent
pebble
pencil
pepper
period
pickle
pillow
planet
pocket
poetry
potato
powder
prison
puzzle
rabbit
random
reason
record
remote
rescue
ribbon
rocket
saddle
salmon
sample
school
screen
season
secret
shadow
shovel
silver
simple
singer
sister
sleeve
socket
spider
spirit
spring
square
stable
statue
strong
sudden
summer
supply
symbol
tablet
talent
target
temple
tennis
thirty
ticket
timber
tomato
tongue
travel
tunnel
turkey
velvet
violin
voyage
walnut
wander
weapon
window
winter
wizard
wonder
yellow
zipper
"""

COMMON_POOL_SIZE = 100
COMMON_POOL_CHANCE = 0.5

ALPHABET_SIZE = 26

# ---------------------------------------------------------------------------
# Terminal escape codes
# ---------------------------------------------------------------------------
CSI = "\x1b["
GREEN = "\x1b[0;32m"
RED = "\x1b[0;31m"
RESET = "\x1b[0m"

# Seconds to wait after ESC for the rest of an arrow/function key sequence
ESCAPE_SEQUENCE_TIMEOUT = 0.05

# Round outcomes
CORRECT = 'correct'
SKIPPED = 'skipped'
QUIT = 'quit'

# Debug logging (never to the terminal: it is in raw mode while drawing)
DEBUG_LOG = False
DEBUG_LOG_PATH = os.path.join(os.path.expanduser("~"), ".shift_drill.log")

logger = logging.getLogger("shift_drill")
logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Pure drill logic (no terminal dependency)
# ---------------------------------------------------------------------------
def load_words(text=WORD_LIST):
    """Parse a newline-separated word list.

    Blank lines are skipped and words are lowercased. Anything that is
    not a plain a-z word is rejected, since mistakes are tallied by letter.
    """
    words = []
    for lineno, line in enumerate(text.splitlines(), 1):
        word = line.strip().lower()
        if not word:
            continue
        if not all(curses.ascii.islower(ch) for ch in word):
            raise ValueError(f"line {lineno}: {word!r} is not a lowercase ASCII word")
        words.append(word)
    return words


def encode(word):
    """Shift every letter one place forward, wrapping z around to a."""
    return "".join(
        chr((ord(ch) - ord('a') + 1) % ALPHABET_SIZE + ord('a')) for ch in word
    )


def new_tally():
    """Return an empty mistake tally, one slot per letter a-z."""
    return [0] * ALPHABET_SIZE


def pick_question(words, rng=random):
    """Pick the next question.

    Half of the rounds draw from the common pool at the head of the list,
    the rest from everything after it. Lists no longer than the common
    pool always draw from the whole list.
    """
    if rng.random() < COMMON_POOL_CHANCE or len(words) <= COMMON_POOL_SIZE:
        pool = words[:COMMON_POOL_SIZE]
    else:
        pool = words[COMMON_POOL_SIZE:]
    return rng.choice(pool)


def press_char(ch, guess, question, answer, tally):
    """Append a typed letter to the guess and score it.

    Only letters inside the answer's length are scored; a wrong one counts
    against the question's letter at that position, not the cipher's.
    """
    if not curses.ascii.isalpha(ch):
        return
    guess.append(ch)
    pos = len(guess) - 1
    if pos >= len(answer):
        return
    if ch != answer[pos]:
        tally[ord(question[pos]) - ord('a')] += 1


def handle_key(key, guess, question, answer, tally):
    """Apply one key event to the round.

    Returns the round outcome (CORRECT, SKIPPED, QUIT) when the key ends
    the round, None while it is still going.
    """
    if key is None:
        return None
    code = ord(key)
    if code == curses.ascii.ESC:
        return QUIT
    if code in (curses.ascii.CR, curses.ascii.NL):
        return SKIPPED
    if code == curses.ascii.TAB:
        return CORRECT
    if code in (curses.ascii.DEL, curses.ascii.BS):
        if guess:
            guess.pop()
        return None
    press_char(key, guess, question, answer, tally)
    return None


def format_report(tally):
    """Return the end-of-session report lines, skipping letters with no mistakes."""
    lines = ["", "mistakes:"]
    for i, count in enumerate(tally):
        if count == 0:
            continue
        lines.append(f"{chr(ord('a') + i)} - {count}")
    return lines


# ---------------------------------------------------------------------------
# Terminal
# ---------------------------------------------------------------------------
class Terminal(abc.ABC):
    """What the drill needs from a terminal.

    Columns are 0-based. read_key() blocks for one key and returns it as a
    one-character string, or None for a key the drill has no use for.
    raw_mode() returns a context manager that keeps the terminal in raw
    mode for its duration.
    """

    @abc.abstractmethod
    def write(self, text):
        raise NotImplementedError

    @abc.abstractmethod
    def move_up(self, n=1):
        raise NotImplementedError

    @abc.abstractmethod
    def move_down(self, n=1):
        raise NotImplementedError

    @abc.abstractmethod
    def move_to_column(self, col):
        raise NotImplementedError

    @abc.abstractmethod
    def move_to_previous_line(self, n=1):
        raise NotImplementedError

    @abc.abstractmethod
    def clear_line(self):
        raise NotImplementedError

    @abc.abstractmethod
    def flush(self):
        raise NotImplementedError

    @abc.abstractmethod
    def read_key(self):
        raise NotImplementedError

    @abc.abstractmethod
    def raw_mode(self):
        raise NotImplementedError


class AnsiTerminal(Terminal):
    """Terminal over a POSIX tty: termios raw mode, ANSI escape output."""

    def __init__(self, fd=None, out=None):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.out = sys.stdout if out is None else out

    def write(self, text):
        self.out.write(text)

    def move_up(self, n=1):
        self.write(f"{CSI}{n}A")

    def move_down(self, n=1):
        self.write(f"{CSI}{n}B")

    def move_to_column(self, col):
        self.write(f"{CSI}{col + 1}G")

    def move_to_previous_line(self, n=1):
        self.write(f"{CSI}{n}F")

    def clear_line(self):
        self.write(f"{CSI}2K")

    def flush(self):
        self.out.flush()

    def read_key(self):
        ch = self._read_char()
        if ord(ch) == curses.ascii.ESC and self._pending():
            # Arrow and function keys arrive as ESC followed by more bytes
            rest = []
            while self._pending():
                rest.append(self._read_char())
            logger.debug("ignored escape sequence %r", "".join(rest))
            return None
        return ch

    def _pending(self):
        ready, _, _ = select.select([self.fd], [], [], ESCAPE_SEQUENCE_TIMEOUT)
        return bool(ready)

    def _read_char(self):
        data = os.read(self.fd, 1)
        if not data:
            raise EOFError("terminal input closed")
        return data.decode("latin-1")

    @contextlib.contextmanager
    def raw_mode(self):
        saved = termios.tcgetattr(self.fd)
        tty.setraw(self.fd)
        logger.debug("raw mode on")
        try:
            yield self
        finally:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, saved)
            logger.debug("raw mode off")


# ---------------------------------------------------------------------------
# Drawing helpers
# ---------------------------------------------------------------------------
def marker(diff):
    """One-column marker for a letter distance: '1'-'9', '+' past nine."""
    return '+' if diff > 9 else str(diff)


def diff_lines(question, answer, guess):
    """Build the three lines of the guess diff.

    The top line marks letters typed too high, the bottom line letters
    typed too low, each with the distance to the expected letter. The
    middle line is the prompt plus the guess colored by position match.
    Letters past the end of the answer are red and unmarked.
    """
    prompt = f"{question} -> "
    pad = " " * len(prompt)
    top, middle, bottom = [pad], [prompt], [pad]

    for i, ch in enumerate(guess):
        if i >= len(answer):
            middle.append(RED)
        elif ch == answer[i]:
            middle.append(GREEN)
            top.append(" ")
            bottom.append(" ")
        else:
            middle.append(RED)
            diff = ord(ch) - ord(answer[i])
            if diff > 0:
                top.append(marker(diff))
                bottom.append(" ")
            else:
                top.append(" ")
                bottom.append(marker(-diff))
        middle.append(ch)

    middle.append(RESET)
    return ["".join(top), "".join(middle), "".join(bottom)]


def clear_lines(term):
    """Clear the three drawn lines, starting from the middle one.

    Leaves the cursor at column 0 of the top line.
    """
    term.move_down(1)
    term.clear_line()
    term.move_to_previous_line(1)
    term.clear_line()
    term.move_to_previous_line(1)
    term.clear_line()


def display_guess(term, question, answer, guess):
    """Redraw the diff in place and park the cursor after the guess."""
    clear_lines(term)
    for i, line in enumerate(diff_lines(question, answer, guess)):
        if i:
            term.write("\n")
            term.move_to_column(0)
        term.write(line)
    term.move_up(1)
    term.move_to_column(len(question) + 4 + len(guess))
    term.flush()


# ---------------------------------------------------------------------------
# Rounds and session
# ---------------------------------------------------------------------------
def play_round(term, question, answer, tally):
    """Run one question until it is answered, skipped, or the user quits."""
    guess = []
    while True:
        current = "".join(guess)
        display_guess(term, question, answer, current)
        if current == answer:
            return CORRECT
        outcome = handle_key(term.read_key(), guess, question, answer, tally)
        if outcome is not None:
            return outcome


def run_session(term, words, rng=random):
    """Drill until the user quits, then print the mistake report.

    Returns the mistake tally.
    """
    tally = new_tally()
    rounds = 0

    with term.raw_mode():
        term.write("\n\n")
        while True:
            question = pick_question(words, rng)
            answer = encode(question)
            outcome = play_round(term, question, answer, tally)
            rounds += 1
            logger.debug("round %d: %s -> %s (%s)", rounds, question, answer, outcome)

            if outcome == QUIT:
                break
            if outcome == CORRECT:
                clear_lines(term)
                term.write(f"{GREEN}{question}{RESET} -> {answer}\n\n\n")

    clear_lines(term)
    term.write("\n".join(format_report(tally)) + "\n")
    term.flush()
    logger.debug("session over after %d rounds, tally %s", rounds, tally)
    return tally


def _handle_sigterm(signum, frame):
    """Turn SIGTERM into SystemExit so raw mode is restored on the way out."""
    raise SystemExit(128 + signum)


def main():
    """Entry point for the shift-drill command."""
    if DEBUG_LOG:
        handler = logging.FileHandler(DEBUG_LOG_PATH, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    signal.signal(signal.SIGTERM, _handle_sigterm)

    words = load_words()
    logger.debug("loaded %d words", len(words))
    run_session(AnsiTerminal(), words)


if __name__ == "__main__":
    main()
