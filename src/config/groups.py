"""Configured fussball.de Staffeln."""

from __future__ import annotations

from typing import Final, List

from domain.models import GroupConfig


def kassel_e_jugend() -> List[GroupConfig]:
    return [
        GroupConfig(id="group1", name="EJKK Kassel Gr. 1", staffel_id="02TMJADUIC000007VS5489BUVSSD35NB-G"),
        GroupConfig(id="group2", name="EJKK Kassel Gr. 2", staffel_id="02TMJADUO0000008VS5489BUVSSD35NB-G"),
        GroupConfig(id="group3", name="EJKK Kassel Gr. 3", staffel_id="02TMJADUSK000008VS5489BUVSSD35NB-G"),
        GroupConfig(id="group4", name="EJKK Kassel Gr. 4", staffel_id="02TMJADV14000008VS5489BUVSSD35NB-G"),
        GroupConfig(id="group5", name="EJKK Kassel Gr. 5", staffel_id="02TMJADV6G000005VS5489BUVSSD35NB-G"),
        GroupConfig(id="group6", name="EJKK Kassel Gr. 6", staffel_id="02TMJADVB4000005VS5489BUVSSD35NB-G"),
        GroupConfig(id="group7", name="EJKK Kassel Gr. 7", staffel_id="02TMJADVF4000005VS5489BUVSSD35NB-G"),
        GroupConfig(id="group8", name="EJKK Kassel Gr. 8", staffel_id="02TT1ER3KO000004VS5489BUVVJ8R9DS-G"),
    ]


# Hallen-Kreisturnier overview; the pre-game groups (E - Junioren Gr. X) are
# only linked behind expandable headers there.
INDOOR_PRE_GAMES_STAFFEL_ID: Final = "02TFRJDJVO000000VS5489BSVTA87VEB-C"
