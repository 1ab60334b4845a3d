from __future__ import annotations

from scraper.models.records import CardSection, FightResultStatus
from scraper.utils import ufc_parser
from scraper.utils.parser import RecordCounts

ATHLETE_PAGE = """
<div class="hero-profile">
  <p class="hero-profile__nickname">"Bones"</p>
  <p class="hero-profile__tag">Heavyweight Division</p>
  <p class="hero-profile__division-title">Heavyweight Division</p>
  <p class="hero-profile__division-body">27-1-0 (W-L-D)</p>
  <img src="https://dmxg5wxfqgb4u.cloudfront.net/styles/event_results_athlete_headshot/s3/2023-03/JONES_JON_03-04.png?itok=x1">
</div>
<div class="c-bio__field">
  <div class="c-bio__label">Place of Birth</div>
  <div class="c-bio__text">Rochester, New York, United States</div>
</div>
"""


def _corner(
    corner: str,
    given: str,
    family: str,
    *,
    country: str,
    record: str,
    image: str,
    outcome: str = "",
) -> str:
    outcome_html = ""
    if outcome:
        outcome_html = (
            '<div class="c-listing-fight__outcome-wrapper">'
            f'<div class="c-listing-fight__outcome">{outcome}</div></div>'
        )
    return f"""
      <div class="c-listing-fight__corner-name c-listing-fight__corner-name--{corner}">
        <span class="c-listing-fight__corner-given-name">{given}</span>
        <span class="c-listing-fight__corner-family-name">{family}</span>
      </div>
      <div class="c-listing-fight__corner-record--{corner}">{record}</div>
      <div class="c-listing-fight__corner-image--{corner}"><img src="{image}"></div>
      <div class="c-listing-fight__country--{corner}"><div class="c-listing-fight__country-text">{country}</div></div>
      <div class="c-listing-fight__corner-body--{corner}">{outcome_html}</div>
    """


IMAGE = "https://dmxg5wxfqgb4u.cloudfront.net/styles/event_fight_card_upper_body_of_standing_athlete/s3/2024-12/{name}_{side}_12-07.png"

FIGHT_CARD_PAGE = f"""
<div id="main-card">
  <div class="c-listing-fight" data-fmid="11001">
    <div class="c-listing-fight__class-text">Flyweight Title Bout</div>
    {_corner("red", "Alexandre", "Pantoja", country="Brazil", record="28-5-0", image=IMAGE.format(name="PANTOJA_ALEXANDRE", side="L"), outcome="Win")}
    {_corner("blue", "Kai", "Asakura", country="Japan", record="21-4-0", image=IMAGE.format(name="ASAKURA_KAI", side="R"), outcome="Loss")}
    <div class="c-listing-fight__result-text round">2</div>
    <div class="c-listing-fight__result-text time">2:05</div>
    <div class="c-listing-fight__result-text method">Submission</div>
  </div>
  <div class="c-listing-fight" data-fmid="11002">
    <div class="c-listing-fight__class-text">Welterweight Bout</div>
    {_corner("red", "Shavkat", "Rakhmonov", country="Kazakhstan", record="18-0-0", image=IMAGE.format(name="RAKHMONOV_SHAVKAT", side="L"))}
    {_corner("blue", "Ian", "Machado Garry", country="Ireland", record="15-0-0", image=IMAGE.format(name="GARRY_IAN", side="R"))}
  </div>
  <div class="c-listing-fight" data-fmid="11003">
    <div class="c-listing-fight__class-text">Lightweight Bout</div>
    {_corner("red", "Lonely", "Corner", country="USA", record="1-0-0", image=IMAGE.format(name="CORNER_LONELY", side="L"))}
  </div>
  <div class="c-listing-fight" data-fmid="11004">
    <div class="c-listing-fight__class-text">Featherweight Bout</div>
    {_corner("red", "Bryce", "Mitchell", country="USA", record="17-2-0", image=IMAGE.format(name="MITCHELL_BRYCE", side="L"), outcome="Draw")}
    {_corner("blue", "Kron", "Gracie", country="Brazil", record="5-2-0", image=IMAGE.format(name="GRACIE_KRON", side="R"), outcome="Draw")}
  </div>
</div>
<div id="prelims-card">
  <div class="c-listing-fight">
    <div class="c-listing-fight__class-text">Flyweight Bout</div>
    {_corner("red", "Kai", "Kara-France", country="New Zealand", record="24-11-0", image=IMAGE.format(name="KARA-FRANCE_KAI", side="L"))}
    {_corner("blue", "Steve", "Erceg", country="Australia", record="12-3-0", image=IMAGE.format(name="ERCEG_STEVE", side="R"))}
  </div>
</div>
<div id="early-prelims"></div>
"""


def test_extract_athlete_fields_from_hero_block():
    assert ufc_parser.extract_nickname(ATHLETE_PAGE) == "Bones"
    assert ufc_parser.extract_weight_class(ATHLETE_PAGE) == "Heavyweight"
    assert ufc_parser.extract_record(ATHLETE_PAGE) == RecordCounts(27, 1, 0)
    assert ufc_parser.extract_country(ATHLETE_PAGE) == "United States"
    assert ufc_parser.extract_headshot_url(ATHLETE_PAGE) == (
        ufc_parser.HEADSHOT_BASE_URL + "2023-03/JONES_JON_03-04.png"
    )


def test_extract_record_falls_back_to_span_layout():
    html = '<div class="record">12 <span class="dash">-</span> 3 <span class="dash">-</span> 1</div>'
    assert ufc_parser.extract_record(html) == RecordCounts(12, 3, 1)


def test_extract_country_uses_fighting_out_of_when_birthplace_missing():
    html = """
    <div class="c-bio__label">Fighting out of</div>
    <div class="c-bio__text">Dublin, Ireland</div>
    """
    assert ufc_parser.extract_country(html) == "Ireland"


def test_extractors_return_none_for_unrelated_markup():
    html = "<html><body><p>Nothing to see</p></body></html>"
    assert ufc_parser.extract_nickname(html) is None
    assert ufc_parser.extract_weight_class(html) is None
    assert ufc_parser.extract_record(html) is None
    assert ufc_parser.extract_country(html) is None
    assert ufc_parser.extract_headshot_url(html) is None


def test_parse_sitemap_athlete_slugs_deduplicates_in_order():
    xml = """
    <urlset>
      <url><loc>https://www.ufc.com/athlete/jon-jones</loc></url>
      <url><loc>https://www.ufc.com/athlete/tom-aspinall</loc></url>
      <url><loc>https://www.ufc.com/athlete/jon-jones</loc></url>
      <url><loc>https://www.ufc.com/event/ufc-310</loc></url>
    </urlset>
    """
    assert ufc_parser.parse_sitemap_athlete_slugs(xml) == ["jon-jones", "tom-aspinall"]


def test_parse_roster_cards_reads_flipcards():
    html = """
    <div class="c-listing-athlete-flipcard">
      <span class="c-listing-athlete__name">Jon Jones</span>
      <div class="c-listing-athlete__title"><div class="field__item">Heavyweight Division</div></div>
      <span class="c-listing-athlete__record">27-1-0 (W-L-D)</span>
      <a href="/athlete/jon-jones">View Profile</a>
    </div>
    <div class="c-listing-athlete-flipcard">
      <span class="c-listing-athlete__name">Jon Jones</span>
      <a href="/athlete/jon-jones">View Profile</a>
    </div>
    """
    fighters = ufc_parser.parse_roster_cards(html)

    assert len(fighters) == 1
    jones = fighters[0]
    assert jones.external_id == "jon-jones"
    assert (jones.first_name, jones.last_name) == ("Jon", "Jones")
    assert jones.weight_class == "Heavyweight Division"
    assert (jones.wins, jones.losses, jones.draws) == (27, 1, 0)


def test_parse_roster_cards_falls_back_to_profile_links():
    html = """
    <a href="/athlete/tom-aspinall" class="e-button--black">View Profile</a>
    <a href="/athlete/madonna" class="e-button--black">View Profile</a>
    <a href="/athlete/tom-aspinall" class="e-button--black">View Profile</a>
    """
    fighters = ufc_parser.parse_roster_cards(html)

    assert [(f.external_id, f.first_name, f.last_name) for f in fighters] == [
        ("tom-aspinall", "Tom", "Aspinall")
    ]


def test_parse_rankings_athletes_prefers_link_text_then_slug():
    html = """
    <table>
      <tr><td><a href="/athlete/islam-makhachev">Islam Makhachev</a></td></tr>
      <tr><td><a href="https://www.ufc.com/athlete/jon-jones">JJ</a></td></tr>
      <tr><td><a href="/athlete/islam-makhachev">Islam Makhachev</a></td></tr>
      <tr><td><a href="/athlete/">Broken</a></td></tr>
    </table>
    """
    fighters = ufc_parser.parse_rankings_athletes(html)

    assert [(f.external_id, f.first_name, f.last_name) for f in fighters] == [
        ("islam-makhachev", "Islam", "Makhachev"),
        ("jon-jones", "Jon", "Jones"),
    ]


def test_normalize_bout_label_detects_title_fights():
    assert ufc_parser.normalize_bout_label("Flyweight Title Bout") == ("Flyweight", True)
    assert ufc_parser.normalize_bout_label("Lightweight Bout") == ("Lightweight", False)
    assert ufc_parser.normalize_bout_label("Women's Strawweight Interim Title Bout") == (
        "Women's Strawweight",
        True,
    )
    assert ufc_parser.normalize_bout_label(None) == ("Unknown", False)


def test_parse_fight_card_assigns_sections_and_ordinals():
    fights = ufc_parser.parse_fight_card(FIGHT_CARD_PAGE, "ufc-310")

    assert [(f.card_section, f.order) for f in fights] == [
        (CardSection.MAIN, 100),
        (CardSection.MAIN, 101),
        (CardSection.MAIN, 102),
        (CardSection.PRELIM, 200),
    ]
    assert [f.is_main_event for f in fights] == [True, False, False, False]
    assert [f.is_co_main_event for f in fights] == [False, True, False, False]


def test_parse_fight_card_maps_title_bout_and_result():
    main_event = ufc_parser.parse_fight_card(FIGHT_CARD_PAGE, "ufc-310")[0]

    assert main_event.external_id == "11001"
    assert main_event.event_external_id == "ufc-310"
    assert main_event.weight_class == "Flyweight"
    assert main_event.is_title_fight is True
    assert main_event.result_status is FightResultStatus.COMPLETED
    assert main_event.result is not None
    assert main_event.result.winner_external_id == "alexandre-pantoja"
    assert main_event.result.method == "Submission"
    assert main_event.result.round == 2
    assert main_event.result.time == "2:05"


def test_parse_fight_card_builds_corner_descriptors():
    main_event = ufc_parser.parse_fight_card(FIGHT_CARD_PAGE, "ufc-310")[0]
    pantoja, asakura = main_event.fighter_a, main_event.fighter_b

    assert pantoja.external_id == "alexandre-pantoja"
    assert pantoja.country == "Brazil"
    assert (pantoja.wins, pantoja.losses, pantoja.draws) == (28, 5, 0)
    assert pantoja.image_url == (
        "https://dmxg5wxfqgb4u.cloudfront.net/styles/event_results_athlete_headshot"
        "/s3/2024-12/PANTOJA_ALEXANDRE_12-07.png"
    )
    assert asakura.external_id == "kai-asakura"
    assert asakura.image_url.endswith("/ASAKURA_KAI_12-07.png")


def test_parse_fight_card_handles_scheduled_draws_and_missing_ids():
    fights = ufc_parser.parse_fight_card(FIGHT_CARD_PAGE, "ufc-310")

    scheduled, draw, prelim = fights[1], fights[2], fights[3]
    assert scheduled.result_status is FightResultStatus.SCHEDULED
    assert scheduled.result is None
    assert draw.result_status is FightResultStatus.DRAW
    assert draw.result.winner_external_id is None
    assert prelim.external_id == "ufc-310-kai-kara-france-vs-steve-erceg"


def test_parse_fight_card_returns_empty_for_page_without_sections():
    assert ufc_parser.parse_fight_card("<html><body></body></html>", "ufc-999") == []
