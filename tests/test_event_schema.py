from dealscope.layers.data_ingestion.event_schema import EventBuilder, EventCategory, EventStore


def test_builder_sets_category_and_actor():
    event = (
        EventBuilder()
        .governance("update_accepted")
        .for_row(3)
        .with_payload({"applied": True})
        .by_user("dana")
        .build()
    )

    assert event.category is EventCategory.GOVERNANCE
    assert event.event_type == "update_accepted"
    assert event.row_id == 3
    assert event.actor_type == "user"
    assert event.to_dict()["actor"] == {"type": "user", "id": "dana"}


def test_each_build_gets_new_id():
    builder = EventBuilder().ingestion("csv_ingested").by_system("deal_assistant")

    assert builder.build().id != builder.build().id


def test_query_newest_first_with_filters():
    store = EventStore()
    store.append(EventBuilder().ingestion("csv_ingested").build())
    store.append(EventBuilder().governance("update_accepted").for_row(1).build())
    store.append(EventBuilder().governance("update_rejected").for_row(2).build())
    store.append(EventBuilder().governance("create_accepted").for_row(-1).build())

    governance = store.query(category=EventCategory.GOVERNANCE)
    assert [e.event_type for e in governance] == [
        "create_accepted", "update_rejected", "update_accepted"
    ]
    assert [e.event_type for e in store.query(row_id=2)] == ["update_rejected"]
    assert len(store.query(limit=2)) == 2
    assert [e.event_type for e in store.get_by_type("csv_ingested")] == ["csv_ingested"]


def test_clear():
    store = EventStore()
    store.append(EventBuilder().inference("dashboard_installed").build())

    store.clear()

    assert len(store) == 0
    assert list(store) == []
