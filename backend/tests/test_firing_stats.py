from kilnlog.schemas import FiringRecord, FiringType, ZoneOffsetSet
from kilnlog.tools.firing_stats import firing_analytics, is_successful, success_rate


def make(overall, target="6", clay="", firing_type=FiringType.glaze, offsets=None):
    return FiringRecord(
        target_cone=target,
        overall_result=overall,
        clay_body=clay,
        firing_type=firing_type,
        zone_offsets=offsets or ZoneOffsetSet(),
    )


def test_success_rate_empty_history() -> None:
    assert success_rate([]) == 0


def test_success_rules() -> None:
    assert is_successful(make("Perfect cone 6"))
    assert is_successful(make("good"))
    assert is_successful(make("cone 6 flat", target="6"))
    assert not is_successful(make("cone 6 but hot", target="6"))
    assert not is_successful(make("cone 7", target="6"))
    assert not is_successful(make("underfired"))


def test_success_rate_rounds_to_whole_percent() -> None:
    history = [make("perfect cone 6"), make("cone 5"), make("cone 7")]
    # 1 / 3 -> 33.33
    assert success_rate(history) == 33

    history = [make("perfect cone 6"), make("good cone 6"), make("cone 5")]
    # 2 / 3 -> 66.67
    assert success_rate(history) == 67


def test_firing_analytics_empty() -> None:
    out = firing_analytics([])
    assert out.total_firings == 0
    assert out.success_rate == 0
    assert out.average_middle_offset is None
    assert out.zone_average_offsets is None
    assert out.top_clay_body == "None"


def test_firing_analytics_summary() -> None:
    history = [
        make("perfect cone 6", clay="Porcelain", firing_type=FiringType.bisque,
             offsets=ZoneOffsetSet(top=10, middle=10, bottom=10)),
        make("cone 7", clay="Cone 6 Stoneware", offsets=ZoneOffsetSet(top=20, middle=21, bottom=30)),
        make("hot cone 6", clay="Cone 6 Stoneware", firing_type=FiringType.test,
             offsets=ZoneOffsetSet(top=30, middle=30, bottom=50)),
        make("good", offsets=ZoneOffsetSet(top=40, middle=40, bottom=70)),
    ]
    out = firing_analytics(history)

    assert out.total_firings == 4
    assert out.success_rate == 50
    # (10 + 21 + 30 + 40) / 4 = 25.25
    assert out.average_middle_offset == 25
    assert out.top_clay_body == "Cone"
    assert out.zone_average_offsets == {"top": 25, "middle": 25, "bottom": 40}
    assert out.firing_type_counts["glaze"].count == 2
    assert out.firing_type_counts["glaze"].percent == 50
    assert out.firing_type_counts["bisque"].count == 1
    assert out.firing_type_counts["test"].percent == 25


def test_zone_averages_use_ten_most_recent() -> None:
    old = [make("cone 6", offsets=ZoneOffsetSet(top=0, middle=0, bottom=0)) for _ in range(5)]
    recent = [make("cone 6", offsets=ZoneOffsetSet(top=50, middle=60, bottom=70)) for _ in range(10)]
    out = firing_analytics(old + recent)
    assert out.zone_average_offsets == {"top": 50, "middle": 60, "bottom": 70}
