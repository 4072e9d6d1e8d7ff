"""Valid example arguments for every chart kind, shared by the test modules."""

SAMPLE_ARGS = {
    "line": {
        "title": "Revenue",
        "data": [
            {"time": "2020", "value": 100},
            {"time": "2021", "value": 120},
            {"time": "2022", "value": 145},
            {"time": "2023", "value": 150},
            {"time": "2024", "value": 167},
        ],
        "axisXTitle": "Year",
        "axisYTitle": "Revenue",
    },
    "area": {
        "data": [
            {"time": "2020", "value": 10, "group": "A"},
            {"time": "2021", "value": 14, "group": "A"},
            {"time": "2020", "value": 6, "group": "B"},
            {"time": "2021", "value": 9, "group": "B"},
        ],
        "stack": True,
    },
    "bar": {
        "data": [
            {"category": "Python", "value": 62},
            {"category": "JavaScript", "value": 58},
            {"category": "Go", "value": 21},
        ],
    },
    "column": {
        "data": [
            {"category": "Beijing", "value": 825, "group": "Oil"},
            {"category": "Beijing", "value": 60, "group": "EV"},
            {"category": "Shanghai", "value": 1000, "group": "Oil"},
            {"category": "Shanghai", "value": 45, "group": "EV"},
        ],
    },
    "scatter": {
        "data": [{"x": 10, "y": 15}, {"x": 20, "y": 25}, {"x": 30, "y": 22}, {"x": 40, "y": 41}],
    },
    "histogram": {"data": [78, 88, 60, 100, 95, 82, 71, 66, 90, 85], "binNumber": 5},
    "boxplot": {
        "data": [
            {"category": "A", "value": 10},
            {"category": "A", "value": 12},
            {"category": "A", "value": 15},
            {"category": "A", "value": 20},
            {"category": "B", "value": 8},
            {"category": "B", "value": 11},
            {"category": "B", "value": 14},
            {"category": "B", "value": 19},
        ],
    },
    "violin": {
        "data": [
            {"category": "A", "value": 10},
            {"category": "A", "value": 12},
            {"category": "A", "value": 15},
            {"category": "B", "value": 8},
            {"category": "B", "value": 11},
            {"category": "B", "value": 19},
        ],
    },
    "waterfall": {
        "data": [
            {"category": "Q1", "value": 100},
            {"category": "Q2", "value": 50},
            {"category": "Q3", "value": -30},
            {"category": "Total", "isTotal": True},
        ],
    },
    "pie": {
        "data": [
            {"category": "Rent", "value": 45},
            {"category": "Food", "value": 25},
            {"category": "Travel", "value": 30},
        ],
        "innerRadius": 0.6,
    },
    "funnel": {
        "data": [
            {"category": "Visit", "value": 5000},
            {"category": "Cart", "value": 1800},
            {"category": "Order", "value": 600},
        ],
    },
    "liquid": {"percent": 0.42, "shape": "circle"},
    "word-cloud": {
        "data": [
            {"text": "chart", "value": 30},
            {"text": "python", "value": 22},
            {"text": "data", "value": 18},
            {"text": "plot", "value": 9},
        ],
    },
    "venn": {
        "data": [
            {"sets": ["A"], "value": 20, "label": "A"},
            {"sets": ["B"], "value": 15, "label": "B"},
            {"sets": ["A", "B"], "value": 5},
        ],
    },
    "treemap": {
        "data": [
            {"name": "Design", "value": 70, "children": [
                {"name": "UI", "value": 40},
                {"name": "UX", "value": 30},
            ]},
            {"name": "Engineering", "value": 90, "children": [
                {"name": "Backend", "value": 50},
                {"name": "Frontend", "value": 40},
            ]},
        ],
    },
    "sankey": {
        "data": [
            {"source": "Coal", "target": "Power", "value": 40},
            {"source": "Gas", "target": "Power", "value": 25},
            {"source": "Power", "target": "Homes", "value": 35},
            {"source": "Power", "target": "Industry", "value": 30},
        ],
        "nodeAlign": "center",
    },
    "radar": {
        "data": [
            {"name": "Speed", "value": 8},
            {"name": "Power", "value": 6},
            {"name": "Range", "value": 7},
            {"name": "Comfort", "value": 5},
        ],
    },
    "dual-axes": {
        "categories": ["2021", "2022", "2023"],
        "series": [
            {"type": "column", "data": [91, 120, 135], "axisYTitle": "Sales"},
            {"type": "line", "data": [0.12, 0.18, 0.16], "axisYTitle": "Margin"},
        ],
        "axisXTitle": "Year",
    },
    "network-graph": {
        "data": {
            "nodes": [{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}],
            "edges": [
                {"source": "Alice", "target": "Bob", "name": "knows"},
                {"source": "Bob", "target": "Carol", "name": "knows"},
            ],
        },
    },
    "flow-diagram": {
        "data": {
            "nodes": [{"name": "Start"}, {"name": "Review"}, {"name": "Done"}],
            "edges": [
                {"source": "Start", "target": "Review"},
                {"source": "Review", "target": "Done"},
            ],
        },
    },
    "mind-map": {
        "data": {"name": "Trip", "children": [
            {"name": "Transport", "children": [{"name": "Train"}, {"name": "Flight"}]},
            {"name": "Stay"},
        ]},
    },
    "organization-chart": {
        "data": {"name": "CEO", "children": [
            {"name": "CTO", "children": [{"name": "Engineer"}]},
            {"name": "CFO"},
        ]},
    },
    "fishbone-diagram": {
        "data": {"name": "Late delivery", "children": [
            {"name": "People", "children": [{"name": "Understaffed"}]},
            {"name": "Process", "children": [{"name": "Manual steps"}]},
        ]},
    },
}

# Tool argument examples for the kinds that only render remotely.
REMOTE_ONLY_ARGS = {
    "spreadsheet": {"data": [{"name": "A", "score": 1}, {"name": "B", "score": 2}]},
    "district-map": {"title": "Shanghai", "data": {"name": "上海市"}},
    "path-map": {"title": "Route", "data": [{"data": ["西安钟楼", "西安大雁塔"]}]},
    "pin-map": {"title": "Sights", "data": ["西安钟楼", "西安大雁塔"]},
}
