"""Tests for the catalog source."""

import json

import pytest

from friendly_urls.catalog import CatalogItem, InMemoryCatalog, ItemKind


class TestItemKind:
    """Test kind tag parsing."""
    
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("movie", ItemKind.MOVIE),
            ("Movie", ItemKind.MOVIE),
            ("Series", ItemKind.SHOW),
            ("BoxSet", ItemKind.COLLECTION),
            ("CollectionFolder", ItemKind.FOLDER),
            ("MusicAlbum", ItemKind.OTHER),
            (None, ItemKind.OTHER),
            (ItemKind.GENRE, ItemKind.GENRE),
        ],
    )
    def test_parse(self, tag, expected):
        assert ItemKind.parse(tag) == expected


class TestInMemoryCatalog:
    """Test the in-memory catalog."""
    
    @pytest.mark.asyncio
    async def test_get_item(self, catalog):
        """Test single item lookup."""
        item = await catalog.get_item("m1")
        
        assert item.name == "Inception"
        assert await catalog.get_item("nope") is None
    
    @pytest.mark.asyncio
    async def test_roots(self, catalog):
        """Test root folders are the parentless items."""
        roots = await catalog.get_root_folders()
        
        assert [r.id for r in roots] == ["lib-movies", "lib-shows", "lib-people"]
    
    @pytest.mark.asyncio
    async def test_recursive_children(self, catalog):
        """Test descendants come depth first, parents before children."""
        shows = await catalog.get_item("lib-shows")
        
        children = await catalog.get_recursive_children(shows)
        
        assert [c.id for c in children] == ["s1", "se2", "ep3"]
    
    @pytest.mark.asyncio
    async def test_series_name_from_parents(self, catalog):
        """Test episodes inherit the series name through their season."""
        episode = await catalog.get_item("ep3")
        
        assert episode.series_name == "The Office"
        assert episode.series_id == "s1"
    
    @pytest.mark.asyncio
    async def test_series_name_from_series_id(self):
        """Test an explicit series id is honoured."""
        catalog = InMemoryCatalog([
            CatalogItem(id="s1", kind=ItemKind.SHOW, name="Dark"),
            CatalogItem(id="se1", kind=ItemKind.SEASON, season_index=1, series_id="s1"),
        ])
        
        season = await catalog.get_item("se1")
        
        assert season.series_name == "Dark"
    
    @pytest.mark.asyncio
    async def test_series_rename_reaches_episodes(self, catalog):
        """Test a renamed show is picked up by its already-resolved episodes."""
        await catalog.get_item("ep3")
        catalog.add(CatalogItem(id="s1", kind=ItemKind.SHOW, name="The Office (US)", parent_id="lib-shows"))
        
        episode = await catalog.get_item("ep3")
        shows = await catalog.get_recursive_children(await catalog.get_item("lib-shows"))
        
        assert episode.series_name == "The Office (US)"
        assert {c.id: c.series_name for c in shows}["se2"] == "The Office (US)"
    
    @pytest.mark.asyncio
    async def test_replace_item(self, catalog):
        """Test adding an item again moves it to its new parent."""
        catalog.add(CatalogItem(id="m1", kind=ItemKind.MOVIE, name="Inception", parent_id="lib-shows"))
        
        movies = await catalog.get_recursive_children(await catalog.get_item("lib-movies"))
        shows = await catalog.get_recursive_children(await catalog.get_item("lib-shows"))
        
        assert "m1" not in [c.id for c in movies]
        assert "m1" in [c.id for c in shows]
        assert len(catalog) == 10
    
    @pytest.mark.asyncio
    async def test_from_json_file(self, tmp_path):
        """Test loading a catalog export."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "items": [
                {"id": "lib", "type": "CollectionFolder", "name": "Movies"},
                {"id": 42, "type": "Movie", "name": "Up", "production_year": "2009", "parent_id": "lib"},
            ]
        }))
        
        catalog = InMemoryCatalog.from_json_file(str(path))
        movie = await catalog.get_item("42")
        
        assert len(catalog) == 2
        assert movie.kind == ItemKind.MOVIE
        assert movie.production_year == 2009
